from fastapi import APIRouter, Depends, HTTPException
from wayne_rm.database.supabase_client import get_service_supabase
from wayne_rm.modules.demo_users.schemas import ProvisionResponse
from wayne_rm.modules.demo_users.service import DemoUserService
from wayne_rm.config import settings
from supabase import Client
from typing import Optional

router = APIRouter(prefix="/demo-users", tags=["demo-users"])


def get_demo_user_service(
    service_client: Optional[Client] = Depends(get_service_supabase)
) -> DemoUserService:
    if not settings.demo_users_enabled:
        raise HTTPException(status_code=403, detail="Demo user provisioning is disabled")
    return DemoUserService(service_client)


@router.post("", response_model=ProvisionResponse)
async def provision_demo_users(
    service: DemoUserService = Depends(get_demo_user_service)
):
    """Create the funcionario/gerente/admin demo accounts (idempotent)"""
    return service.provision()
