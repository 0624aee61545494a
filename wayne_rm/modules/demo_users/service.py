from supabase import Client
from wayne_rm.modules.demo_users.schemas import DemoUser, DemoUserResult, ProvisionResponse
from wayne_rm.config.permissions_config import ROLE_EMPLOYEE, ROLE_MANAGER, ROLE_ADMIN
from wayne_rm.config import settings
from typing import List, Optional, Any
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)

DEMO_USERS = [
    DemoUser(
        email="funcionario@wayne.app.br",
        full_name="Funcionário Demo - Wayne Industries",
        role=ROLE_EMPLOYEE
    ),
    DemoUser(
        email="gerente@wayne.app.br",
        full_name="Gerente Demo - Wayne Industries",
        role=ROLE_MANAGER
    ),
    DemoUser(
        email="admin@wayne.app.br",
        full_name="Administrador Demo - Wayne Industries",
        role=ROLE_ADMIN
    ),
]

_USERS_PER_PAGE = 1000


class DemoUserService:
    def __init__(self, service_client: Optional[Client]):
        if service_client is None:
            raise HTTPException(
                status_code=500,
                detail="Service role key not configured. Cannot provision demo users."
            )
        self.supabase = service_client

    def _find_user(self, email: str) -> Optional[Any]:
        page = 1
        while True:
            users = self.supabase.auth.admin.list_users(page=page, per_page=_USERS_PER_PAGE)
            for user in users:
                if (user.email or "").lower() == email:
                    return user
            if len(users) < _USERS_PER_PAGE:
                return None
            page += 1

    def _upsert_profile(self, user_id: str, demo: DemoUser):
        self.supabase.table("profiles").upsert({
            "user_id": user_id,
            "full_name": demo.full_name,
            "role": demo.role,
        }, on_conflict="user_id").execute()

    def _provision_one(self, demo: DemoUser) -> DemoUserResult:
        existing = self._find_user(demo.email)
        if existing:
            logger.info(f"Demo user {demo.email} already exists, updating profile")
            try:
                self._upsert_profile(existing.id, demo)
                return DemoUserResult(email=demo.email, status="profile_updated")
            except Exception as e:
                logger.error(f"Error updating profile for {demo.email}: {e}")
                return DemoUserResult(email=demo.email, status="profile_update_error", error=str(e))

        try:
            response = self.supabase.auth.admin.create_user({
                "email": demo.email,
                "password": settings.demo_users_password,
                "email_confirm": True,
                "user_metadata": {"full_name": demo.full_name},
            })
        except Exception as e:
            logger.error(f"Error creating demo user {demo.email}: {e}")
            return DemoUserResult(email=demo.email, status="error", error=str(e))

        # The signup trigger normally creates the profile; the upsert sets the role
        try:
            self._upsert_profile(response.user.id, demo)
        except Exception as e:
            logger.error(f"Error creating profile for {demo.email}: {e}")
            return DemoUserResult(email=demo.email, status="user_created_profile_error", error=str(e))

        logger.info(f"Demo user {demo.email} created")
        return DemoUserResult(email=demo.email, status="created")

    def provision(self, demo_users: List[DemoUser] = DEMO_USERS) -> ProvisionResponse:
        """Create or refresh the demo accounts; each account reports its own outcome"""
        logger.info("Starting creation of demo users")
        try:
            results = [self._provision_one(demo) for demo in demo_users]
        except Exception as e:
            logger.error(f"Demo user provisioning failed: {e}")
            raise HTTPException(status_code=500, detail="Demo user provisioning failed")

        logger.info(f"Demo users creation completed: {[r.status for r in results]}")
        return ProvisionResponse(
            success=True,
            message="Demo users creation process completed",
            results=results
        )
