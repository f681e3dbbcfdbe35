# =====================================================
# FILE: contractflow/api/api_v1/blueprints/blueprints.py
# Blueprint Management API
# =====================================================

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from contractflow.core.database import get_db
from contractflow.core.exceptions import raise_http_error
from contractflow.services.blueprint_service import BlueprintService
from contractflow.api.api_v1.blueprints.schemas import (
    BlueprintWrite,
    BlueprintResponse,
    BlueprintDetailResponse,
    PurgeResponse,
)

router = APIRouter(prefix="/api/blueprints", tags=["blueprints"])
logger = logging.getLogger(__name__)


# =====================================================
# 1. LIST BLUEPRINTS
# =====================================================

@router.get("", response_model=List[BlueprintResponse])
async def list_blueprints(db: Session = Depends(get_db)):
    """All blueprints, newest first"""
    try:
        return BlueprintService(db).list()
    except Exception as e:
        raise_http_error(e, "fetching blueprints")


# =====================================================
# 2. CREATE BLUEPRINT
# =====================================================

@router.post("", response_model=BlueprintDetailResponse, status_code=status.HTTP_201_CREATED)
async def create_blueprint(request: BlueprintWrite, db: Session = Depends(get_db)):
    """Create a blueprint together with its fields"""
    try:
        return BlueprintService(db).create(
            name=request.name,
            description=request.description,
            fields=request.field_dicts(),
        )
    except Exception as e:
        raise_http_error(e, "creating blueprint")


# =====================================================
# 3. MAINTENANCE
# =====================================================

@router.post("/maintenance/purge-orphaned-values", response_model=PurgeResponse)
async def purge_orphaned_values(
    contract_id: Optional[str] = Query(None, description="Limit the cleanup to one contract"),
    db: Session = Depends(get_db),
):
    """Delete contract values left behind by blueprint field edits"""
    try:
        removed = BlueprintService(db).purge_orphaned_values(contract_id)
        return PurgeResponse(removed=removed)
    except Exception as e:
        raise_http_error(e, "purging orphaned values")


# =====================================================
# 4. GET / UPDATE / DELETE BLUEPRINT
# =====================================================

@router.get("/{blueprint_id}", response_model=BlueprintDetailResponse)
async def get_blueprint(blueprint_id: str, db: Session = Depends(get_db)):
    """Blueprint with its fields ordered top to bottom"""
    try:
        return BlueprintService(db).get(blueprint_id)
    except Exception as e:
        raise_http_error(e, "fetching blueprint")


@router.put("/{blueprint_id}", response_model=BlueprintDetailResponse)
async def update_blueprint(
    blueprint_id: str,
    request: BlueprintWrite,
    db: Session = Depends(get_db),
):
    """Replace name, description and the full field list"""
    try:
        return BlueprintService(db).update(
            blueprint_id,
            name=request.name,
            description=request.description,
            fields=request.field_dicts(),
        )
    except Exception as e:
        raise_http_error(e, "updating blueprint")


@router.delete("/{blueprint_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_blueprint(blueprint_id: str, db: Session = Depends(get_db)):
    """Delete a blueprint and its fields; contracts created from it are kept"""
    try:
        BlueprintService(db).delete(blueprint_id)
    except Exception as e:
        raise_http_error(e, "deleting blueprint")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
