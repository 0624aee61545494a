from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List


class Settings(BaseSettings):
    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""
    supabase_service_role_key: Optional[str] = None  # Required for demo users and password updates

    # Storage
    avatars_bucket: str = "avatars"
    avatar_max_bytes: int = 2 * 1024 * 1024

    # Auth redirects (email confirmation, password reset)
    site_url: str = "http://localhost:8080"
    auth_cache_ttl_sec: int = 60

    # Demo accounts
    demo_users_enabled: bool = True
    demo_users_password: str = "123456"

    # App
    app_name: str = "wayne-resource-management"
    debug: bool = False
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:8080,http://localhost:5173,http://127.0.0.1:8080,http://127.0.0.1:5173"
    rate_limit: str = "100/minute"  # slowapi format, e.g. "100/minute"
    slow_request_ms: float = 1000.0

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def get_cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",  # No prefix needed
        extra="ignore"
    )


settings = Settings()
