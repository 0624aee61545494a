from supabase import Client
from wayne_rm.modules.resources.schemas import (
    ResourceCreate, ResourceUpdate, ResourceResponse, ResourceRequestResponse
)
from wayne_rm.core.sanitization import sanitize, preset, SanitizationConfig
from wayne_rm.core.validation import ValidationRule, validate_data
from typing import List, Optional, Dict, Any
from fastapi import HTTPException
from datetime import datetime, timezone
import logging

logger = logging.getLogger(__name__)

RESOURCE_SCHEMA = {
    "name": ValidationRule(required=True, max_length=100),
    "location": ValidationRule(max_length=100),
    "description": ValidationRule(max_length=1000),
}

_TEXT = SanitizationConfig(trim=True)


def _clean_fields(data: Dict[str, Any]) -> Dict[str, Any]:
    """Sanitize user text: name/location as plain text, description as a note"""
    cleaned = dict(data)
    for field in ("name", "location"):
        if field in cleaned and cleaned[field] is not None:
            cleaned[field] = sanitize(cleaned[field], "text", _TEXT) or None
    if "description" in cleaned and cleaned["description"] is not None:
        cleaned["description"] = preset("note", cleaned["description"]) or None
    return cleaned


def _check(data: Dict[str, Any], partial: bool = False):
    schema = RESOURCE_SCHEMA
    if partial:
        schema = {k: v for k, v in RESOURCE_SCHEMA.items() if k in data}
    validation = validate_data(data, schema)
    if not validation.is_valid:
        raise HTTPException(status_code=400, detail=[e.model_dump() for e in validation.errors])


class ResourceService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def list_resources(
        self,
        search: Optional[str] = None,
        type: Optional[str] = None,
        status: Optional[str] = None
    ) -> List[ResourceResponse]:
        """Resources newest first; search matches name, description or location"""
        try:
            query = self.supabase.table("resources").select("*")
            if type:
                query = query.eq("type", type)
            if status:
                query = query.eq("status", status)
            result = query.order("created_at", desc=True).execute()
            resources = [ResourceResponse(**row) for row in result.data or []]
        except Exception as e:
            logger.error(f"Error loading resources: {e}")
            raise HTTPException(status_code=500, detail="Could not load the resources")

        if search:
            term = search.lower()
            resources = [
                r for r in resources
                if term in r.name.lower()
                or (r.description and term in r.description.lower())
                or (r.location and term in r.location.lower())
            ]
        return resources

    def get_resource(self, resource_id: str) -> ResourceResponse:
        try:
            result = self.supabase.table("resources")\
                .select("*")\
                .eq("id", resource_id)\
                .limit(1)\
                .execute()
        except Exception as e:
            logger.error(f"Error fetching resource {resource_id}: {e}")
            raise HTTPException(status_code=500, detail="Could not load the resource")
        if not result.data:
            raise HTTPException(status_code=404, detail="Resource not found")
        return ResourceResponse(**result.data[0])

    def create_resource(self, resource_data: ResourceCreate, user_id: str) -> ResourceResponse:
        data = _clean_fields(resource_data.model_dump())
        _check(data)
        try:
            result = self.supabase.table("resources").insert({
                **data,
                "created_by": user_id,
            }).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Could not save the resource")
            logger.info(f"Resource created: {result.data[0]['id']}")
            return ResourceResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error creating resource: {e}")
            raise HTTPException(status_code=500, detail="Could not save the resource")

    def update_resource(self, resource_id: str, resource_data: ResourceUpdate) -> ResourceResponse:
        data = _clean_fields(resource_data.model_dump(exclude_unset=True))
        _check(data, partial=True)
        if not data:
            return self.get_resource(resource_id)
        data["updated_at"] = datetime.now(timezone.utc).isoformat()
        try:
            result = self.supabase.table("resources")\
                .update(data)\
                .eq("id", resource_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Resource not found")
            return ResourceResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error updating resource {resource_id}: {e}")
            raise HTTPException(status_code=500, detail="Could not save the resource")

    def delete_resource(self, resource_id: str) -> bool:
        try:
            result = self.supabase.table("resources")\
                .delete()\
                .eq("id", resource_id)\
                .execute()
        except Exception as e:
            logger.error(f"Error deleting resource {resource_id}: {e}")
            raise HTTPException(status_code=500, detail="Could not delete the resource")
        if not result.data:
            raise HTTPException(status_code=404, detail="Resource not found")
        logger.info(f"Resource deleted: {resource_id}")
        return True

    def list_available(self) -> List[ResourceResponse]:
        """Resources an employee can request, ordered by name"""
        try:
            result = self.supabase.table("resources")\
                .select("*")\
                .eq("status", "disponivel")\
                .order("name")\
                .execute()
            return [ResourceResponse(**row) for row in result.data or []]
        except Exception as e:
            logger.error(f"Error loading available resources: {e}")
            raise HTTPException(status_code=500, detail="Could not load the resources")

    def request_resource(self, resource_id: str, user_id: str) -> ResourceRequestResponse:
        """Record an access request for managers to act on"""
        resource = self.get_resource(resource_id)
        if resource.status != "disponivel":
            raise HTTPException(status_code=400, detail="Resource is not available")
        try:
            result = self.supabase.table("access_logs").insert({
                "user_id": user_id,
                "resource_id": resource_id,
                "action": "solicitacao",
                "notes": f"Solicitação de acesso ao recurso: {resource.name}",
            }).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Could not send the request")
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error requesting resource {resource_id} for {user_id}: {e}")
            raise HTTPException(status_code=500, detail="Could not send the request")

        logger.info(f"User {user_id} requested resource {resource_id}")
        return ResourceRequestResponse(
            access_log_id=result.data[0]["id"],
            resource_id=resource_id,
            message=f"Request for {resource.name} sent to the managers"
        )
