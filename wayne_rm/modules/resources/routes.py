from fastapi import APIRouter, Depends
from wayne_rm.database.supabase_client import get_supabase
from wayne_rm.modules.resources.schemas import (
    ResourceCreate, ResourceUpdate, ResourceResponse, ResourceRequestResponse,
    ResourceType, ResourceStatus
)
from wayne_rm.modules.resources.service import ResourceService
from wayne_rm.core.dependencies import require_permission
from wayne_rm.core.sanitization import preset
from supabase import Client
from typing import List, Dict, Optional

router = APIRouter(prefix="/resources", tags=["resources"])


def get_resource_service(supabase: Client = Depends(get_supabase)) -> ResourceService:
    return ResourceService(supabase)


@router.get("", response_model=List[ResourceResponse])
async def list_resources(
    search: Optional[str] = None,
    type: Optional[ResourceType] = None,
    status: Optional[ResourceStatus] = None,
    user_data: Dict = Depends(require_permission("resources:read")),
    service: ResourceService = Depends(get_resource_service)
):
    """List resources with optional search, type and status filters"""
    return service.list_resources(
        search=preset("query", search) if search else None,
        type=type,
        status=status
    )


@router.get("/available", response_model=List[ResourceResponse])
async def list_available_resources(
    user_data: Dict = Depends(require_permission("resources:read")),
    service: ResourceService = Depends(get_resource_service)
):
    """Resources currently available for request"""
    return service.list_available()


@router.post("", response_model=ResourceResponse, status_code=201)
async def create_resource(
    resource_data: ResourceCreate,
    user_data: Dict = Depends(require_permission("resources:create")),
    service: ResourceService = Depends(get_resource_service)
):
    return service.create_resource(resource_data, user_data["id"])


@router.get("/{resource_id}", response_model=ResourceResponse)
async def get_resource(
    resource_id: str,
    user_data: Dict = Depends(require_permission("resources:read")),
    service: ResourceService = Depends(get_resource_service)
):
    return service.get_resource(resource_id)


@router.put("/{resource_id}", response_model=ResourceResponse)
async def update_resource(
    resource_id: str,
    resource_data: ResourceUpdate,
    user_data: Dict = Depends(require_permission("resources:update")),
    service: ResourceService = Depends(get_resource_service)
):
    return service.update_resource(resource_id, resource_data)


@router.delete("/{resource_id}", status_code=204)
async def delete_resource(
    resource_id: str,
    user_data: Dict = Depends(require_permission("resources:delete")),
    service: ResourceService = Depends(get_resource_service)
):
    """Delete a resource (admins only)"""
    service.delete_resource(resource_id)


@router.post("/{resource_id}/request", response_model=ResourceRequestResponse, status_code=201)
async def request_resource(
    resource_id: str,
    user_data: Dict = Depends(require_permission("resources:request")),
    service: ResourceService = Depends(get_resource_service)
):
    """Ask the managers for access to a resource"""
    return service.request_resource(resource_id, user_data["id"])
