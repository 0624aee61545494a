from pydantic import BaseModel, model_validator
from typing import Optional, Literal
from datetime import datetime

ResourceType = Literal["equipamento", "veiculo", "dispositivo"]
ResourceStatus = Literal["disponivel", "em_uso", "manutencao", "indisponivel"]

TYPE_LABELS = {
    "equipamento": "Equipamento",
    "veiculo": "Veículo",
    "dispositivo": "Dispositivo",
}

STATUS_LABELS = {
    "disponivel": "Disponível",
    "em_uso": "Em Uso",
    "manutencao": "Manutenção",
    "indisponivel": "Indisponível",
}


class ResourceCreate(BaseModel):
    name: str
    type: ResourceType = "equipamento"
    description: Optional[str] = None
    status: ResourceStatus = "disponivel"
    location: Optional[str] = None


class ResourceUpdate(BaseModel):
    name: Optional[str] = None
    type: Optional[ResourceType] = None
    description: Optional[str] = None
    status: Optional[ResourceStatus] = None
    location: Optional[str] = None

    @model_validator(mode="after")
    def reject_null_required_columns(self):
        for field in ("name", "type", "status"):
            if field in self.model_fields_set and getattr(self, field) is None:
                raise ValueError(f"{field} cannot be null")
        return self


class ResourceResponse(BaseModel):
    id: str
    name: str
    type: str
    description: Optional[str] = None
    status: str
    location: Optional[str] = None
    created_by: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    type_label: Optional[str] = None
    status_label: Optional[str] = None

    @model_validator(mode="after")
    def fill_labels(self):
        self.type_label = TYPE_LABELS.get(self.type, self.type)
        self.status_label = STATUS_LABELS.get(self.status, self.status)
        return self

    class Config:
        from_attributes = True


class ResourceRequestResponse(BaseModel):
    access_log_id: str
    resource_id: str
    message: str
