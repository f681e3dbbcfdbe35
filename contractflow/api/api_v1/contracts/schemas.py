# =====================================================
# FILE: contractflow/api/api_v1/contracts/schemas.py
# Contract API Schemas
# =====================================================

from pydantic import BaseModel, ConfigDict, Field, field_serializer
from typing import Optional, List, Dict, Union
from datetime import datetime

from contractflow.api.api_v1.blueprints.schemas import BlueprintFieldResponse, BlueprintResponse
from contractflow.services.workflow_service import ContractStatus
from contractflow.utils.datetime_helpers import format_datetime_to_iso

UNKNOWN_BLUEPRINT = "Unknown blueprint"

# Checkbox values may be sent as JSON booleans
FieldValue = Union[bool, str]


# =====================================================
# REQUESTS
# =====================================================

class ContractCreateRequest(BaseModel):
    name: str = Field("", max_length=255, description="Contract name")
    blueprint_id: str = Field("", description="Blueprint to instantiate")
    initial_values: Dict[str, FieldValue] = Field(
        default_factory=dict,
        description="Field id -> value; missing fields get their type default",
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "John Doe Employment Contract",
                "blueprint_id": "5f0c8f7e-1a52-4f58-9d0e-3f0e3c5e1b11",
                "initial_values": {},
            }
        }
    )


class FieldValuesUpdateRequest(BaseModel):
    values: Dict[str, FieldValue] = Field(..., description="Field id -> new value")


class StatusChangeRequest(BaseModel):
    status: ContractStatus


# =====================================================
# RESPONSES
# =====================================================

class ContractResponse(BaseModel):
    id: str
    name: str
    blueprint_id: str
    status: ContractStatus
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("created_at", "updated_at")
    def serialize_timestamps(self, value: datetime) -> Optional[str]:
        return format_datetime_to_iso(value)


class ContractListItem(ContractResponse):
    blueprint_name: str
    status_label: str
    status_badge: str


class DashboardResponse(BaseModel):
    group: str
    contracts: List[ContractListItem]
    counts: Dict[str, int]


class ContractDetailResponse(BaseModel):
    contract: ContractResponse
    blueprint: Optional[BlueprintResponse] = None
    blueprint_name: str
    fields: List[BlueprintFieldResponse] = []
    values: Dict[str, str] = {}
    orphaned_values: Dict[str, str] = {}
    is_editable: bool
    available_transitions: List[ContractStatus] = []
    orphaned_value_count: int = 0


class StatusInfo(BaseModel):
    status: ContractStatus
    label: str
    badge: str
    next: List[ContractStatus]
    editable: bool
    terminal: bool


class WorkflowResponse(BaseModel):
    statuses: List[StatusInfo]
    groups: Dict[str, List[ContractStatus]]
