from wayne_rm.config.settings import settings, Settings

__all__ = ["settings", "Settings"]
