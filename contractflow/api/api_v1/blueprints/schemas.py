"""
Blueprint Pydantic Schemas
File: contractflow/api/api_v1/blueprints/schemas.py
"""

from pydantic import BaseModel, ConfigDict, Field, field_serializer
from typing import List, Optional
from datetime import datetime

from contractflow.services.field_values import FieldType
from contractflow.utils.datetime_helpers import format_datetime_to_iso


# =====================================================
# FIELD SCHEMAS
# =====================================================

class BlueprintFieldInput(BaseModel):
    """A field as submitted from the blueprint designer"""
    field_type: FieldType = Field(FieldType.TEXT, description="text, date, signature or checkbox")
    label: str = Field("", max_length=255, description="Label shown next to the input")
    position_x: Optional[float] = None
    position_y: Optional[float] = Field(None, description="Defaults to row index * 60")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {"field_type": "text", "label": "Employee Name", "position_x": 0, "position_y": 0}
        }
    )


class BlueprintFieldResponse(BaseModel):
    id: str
    blueprint_id: str
    field_type: FieldType
    label: str
    position_x: float
    position_y: float
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("created_at")
    def serialize_created_at(self, value: datetime) -> Optional[str]:
        return format_datetime_to_iso(value)


# =====================================================
# BLUEPRINT SCHEMAS
# =====================================================

class BlueprintWrite(BaseModel):
    """Schema for creating or replacing a blueprint"""
    # Blank names are rejected by the service with a readable message
    name: str = Field("", max_length=255)
    description: Optional[str] = Field("", max_length=5000)
    fields: List[BlueprintFieldInput] = Field(default_factory=list)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Employment Contract",
                "description": "Standard full-time employment agreement",
                "fields": [
                    {"field_type": "text", "label": "Employee Name"},
                    {"field_type": "date", "label": "Start Date"},
                    {"field_type": "signature", "label": "Employee Signature"},
                    {"field_type": "checkbox", "label": "Accepts NDA"},
                ],
            }
        }
    )

    def field_dicts(self):
        return [f.model_dump() for f in self.fields]


class BlueprintResponse(BaseModel):
    id: str
    name: str
    description: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("created_at", "updated_at")
    def serialize_timestamps(self, value: datetime) -> Optional[str]:
        return format_datetime_to_iso(value)


class BlueprintDetailResponse(BlueprintResponse):
    fields: List[BlueprintFieldResponse] = []


class PurgeResponse(BaseModel):
    success: bool = True
    removed: int
