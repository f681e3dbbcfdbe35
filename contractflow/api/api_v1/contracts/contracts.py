# =====================================================
# FILE: contractflow/api/api_v1/contracts/contracts.py
# Contract Management API
# =====================================================

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Dict, List
import logging

from contractflow.core.database import get_db
from contractflow.core.exceptions import raise_http_error
from contractflow.models.blueprint import Blueprint
from contractflow.models.contract import Contract
from contractflow.services import workflow_service
from contractflow.services.contract_service import ContractService, ContractDetail
from contractflow.services.workflow_service import (
    ContractStatus,
    STATUS_BADGES,
    STATUS_GROUPS,
    STATUS_LABELS,
)
from contractflow.api.api_v1.blueprints.schemas import BlueprintFieldResponse, BlueprintResponse
from contractflow.api.api_v1.contracts.schemas import (
    UNKNOWN_BLUEPRINT,
    ContractCreateRequest,
    ContractDetailResponse,
    ContractListItem,
    ContractResponse,
    DashboardResponse,
    FieldValuesUpdateRequest,
    StatusChangeRequest,
    StatusInfo,
    WorkflowResponse,
)

router = APIRouter(prefix="/api/contracts", tags=["contracts"])
logger = logging.getLogger(__name__)


# =====================================================
# Helper Functions
# =====================================================

def to_list_item(contract: Contract, blueprints: Dict[str, Blueprint]) -> ContractListItem:
    contract_status = ContractStatus(contract.status)
    blueprint = blueprints.get(contract.blueprint_id)
    return ContractListItem(
        id=contract.id,
        name=contract.name,
        blueprint_id=contract.blueprint_id,
        status=contract_status,
        created_at=contract.created_at,
        updated_at=contract.updated_at,
        blueprint_name=blueprint.name if blueprint else UNKNOWN_BLUEPRINT,
        status_label=STATUS_LABELS[contract_status],
        status_badge=STATUS_BADGES[contract_status],
    )


def to_detail_response(detail: ContractDetail) -> ContractDetailResponse:
    return ContractDetailResponse(
        contract=ContractResponse.model_validate(detail.contract),
        blueprint=BlueprintResponse.model_validate(detail.blueprint) if detail.blueprint else None,
        blueprint_name=detail.blueprint.name if detail.blueprint else UNKNOWN_BLUEPRINT,
        fields=[BlueprintFieldResponse.model_validate(f) for f in detail.fields],
        values=detail.values,
        orphaned_values=detail.orphaned_values,
        is_editable=detail.is_editable,
        available_transitions=detail.available_transitions,
        orphaned_value_count=detail.orphaned_value_count,
    )


# =====================================================
# 1. LIST / DASHBOARD
# =====================================================

@router.get("", response_model=List[ContractListItem])
async def list_contracts(
    group: str = Query("all", description="all, active, pending or signed"),
    db: Session = Depends(get_db),
):
    """Contracts with a known blueprint, newest first"""
    try:
        service = ContractService(db)
        contracts, blueprints = service.list_with_blueprints()
        filtered = workflow_service.filter_by_group(contracts, group)
        return [to_list_item(c, blueprints) for c in filtered]
    except Exception as e:
        raise_http_error(e, "fetching contracts")


@router.get("/dashboard", response_model=DashboardResponse)
async def get_dashboard(
    group: str = Query("all", description="all, active, pending or signed"),
    db: Session = Depends(get_db),
):
    """Filtered contract list plus the count shown on each filter tab"""
    try:
        dashboard = ContractService(db).dashboard(group)
        return DashboardResponse(
            group=group,
            contracts=[to_list_item(c, dashboard.blueprints) for c in dashboard.contracts],
            counts=dashboard.counts,
        )
    except Exception as e:
        raise_http_error(e, "loading dashboard")


@router.get("/statuses", response_model=WorkflowResponse)
async def get_status_workflow():
    """Transition table with labels, for building status menus"""
    return WorkflowResponse(
        statuses=[
            StatusInfo(
                status=s,
                label=STATUS_LABELS[s],
                badge=STATUS_BADGES[s],
                next=workflow_service.available_transitions(s),
                editable=workflow_service.is_editable(s),
                terminal=workflow_service.is_terminal(s),
            )
            for s in ContractStatus
        ],
        groups={
            group: [s for s in ContractStatus if s in statuses]
            for group, statuses in STATUS_GROUPS.items()
        },
    )


# =====================================================
# 2. CREATE CONTRACT
# =====================================================

@router.post("", response_model=ContractDetailResponse, status_code=status.HTTP_201_CREATED)
async def create_contract(request: ContractCreateRequest, db: Session = Depends(get_db)):
    """Instantiate a blueprint; every field gets a value row"""
    try:
        service = ContractService(db)
        contract = service.create(
            name=request.name,
            blueprint_id=request.blueprint_id,
            initial_values=request.initial_values,
        )
        return to_detail_response(service.get(contract.id))
    except Exception as e:
        raise_http_error(e, "creating contract")


# =====================================================
# 3. VIEW / EDIT CONTRACT
# =====================================================

@router.get("/{contract_id}", response_model=ContractDetailResponse)
async def get_contract(contract_id: str, db: Session = Depends(get_db)):
    try:
        return to_detail_response(ContractService(db).get(contract_id))
    except Exception as e:
        raise_http_error(e, "fetching contract")


@router.put("/{contract_id}/fields", response_model=ContractDetailResponse)
async def update_field_values(
    contract_id: str,
    request: FieldValuesUpdateRequest,
    db: Session = Depends(get_db),
):
    """Save edited field values; locked and revoked contracts are read-only"""
    try:
        detail = ContractService(db).update_field_values(contract_id, request.values)
        return to_detail_response(detail)
    except Exception as e:
        raise_http_error(e, "saving contract")


@router.post("/{contract_id}/status", response_model=ContractDetailResponse)
async def change_contract_status(
    contract_id: str,
    request: StatusChangeRequest,
    db: Session = Depends(get_db),
):
    """Move the contract one step along the status workflow"""
    try:
        service = ContractService(db)
        service.change_status(contract_id, request.status)
        return to_detail_response(service.get(contract_id))
    except Exception as e:
        raise_http_error(e, "changing contract status")
