# =====================================================
# FILE: contractflow/api/api_v1/navigation/router.py
# View / Navigation State API
# =====================================================

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field
from typing import Optional

from contractflow.core.exceptions import raise_http_error
from contractflow.services.navigation_service import NavigationState, View

router = APIRouter(prefix="/api/navigation", tags=["navigation"])


# =====================================================
# Pydantic Schemas
# =====================================================

class NavigateRequest(BaseModel):
    view: View
    blueprint_id: Optional[str] = Field(None, description="Required for blueprint-edit")
    contract_id: Optional[str] = Field(None, description="Required for contract-view")


class NavigationResponse(BaseModel):
    current_view: View
    selected_blueprint_id: Optional[str] = None
    selected_contract_id: Optional[str] = None


# =====================================================
# Dependencies
# =====================================================

def get_navigation(request: Request) -> NavigationState:
    """The navigation state owned by this application instance"""
    return request.app.state.navigation


# =====================================================
# API Endpoints
# =====================================================

@router.get("", response_model=NavigationResponse)
async def get_navigation_state(navigation: NavigationState = Depends(get_navigation)):
    return navigation.snapshot()


@router.post("", response_model=NavigationResponse)
async def navigate(
    request: NavigateRequest,
    navigation: NavigationState = Depends(get_navigation),
):
    """Switch view; selections not needed by the new view are cleared"""
    try:
        navigation.navigate(
            request.view,
            blueprint_id=request.blueprint_id,
            contract_id=request.contract_id,
        )
    except Exception as e:
        raise_http_error(e, "navigating")
    return navigation.snapshot()


@router.post("/reset", response_model=NavigationResponse)
async def reset_navigation(navigation: NavigationState = Depends(get_navigation)):
    return navigation.reset().snapshot()
