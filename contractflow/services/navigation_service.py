# =====================================================
# FILE: contractflow/services/navigation_service.py
# In-memory view/navigation state
# =====================================================

from enum import Enum
from typing import Dict, Optional
import logging

from contractflow.core.exceptions import ValidationError

logger = logging.getLogger(__name__)


class View(str, Enum):
    DASHBOARD = "dashboard"
    BLUEPRINTS = "blueprints"
    BLUEPRINT_CREATE = "blueprint-create"
    BLUEPRINT_EDIT = "blueprint-edit"
    CONTRACT_CREATE = "contract-create"
    CONTRACT_VIEW = "contract-view"


class NavigationState:
    """
    Current screen and selected entities for one application instance.

    Never persisted. A selection survives only while the current view
    needs it: leaving blueprint-edit clears the blueprint, leaving
    contract-view clears the contract.
    """

    def __init__(self):
        self.current_view: View = View.DASHBOARD
        self.selected_blueprint_id: Optional[str] = None
        self.selected_contract_id: Optional[str] = None

    def navigate(
        self,
        view,
        blueprint_id: Optional[str] = None,
        contract_id: Optional[str] = None,
    ) -> "NavigationState":
        try:
            target = View(view)
        except ValueError:
            raise ValidationError(f"Unknown view: {view}")

        if target == View.BLUEPRINT_EDIT and not blueprint_id:
            raise ValidationError("Select a blueprint to edit")
        if target == View.CONTRACT_VIEW and not contract_id:
            raise ValidationError("Select a contract to view")

        previous = self.current_view
        self.current_view = target

        if target == View.BLUEPRINT_EDIT:
            self.selected_blueprint_id = blueprint_id
        elif previous == View.BLUEPRINT_EDIT or target == View.BLUEPRINT_CREATE:
            self.selected_blueprint_id = None

        if target == View.CONTRACT_VIEW:
            self.selected_contract_id = contract_id
        elif previous == View.CONTRACT_VIEW:
            self.selected_contract_id = None

        logger.debug(f"Navigated {previous.value} -> {target.value}")
        return self

    def reset(self) -> "NavigationState":
        self.current_view = View.DASHBOARD
        self.selected_blueprint_id = None
        self.selected_contract_id = None
        return self

    def snapshot(self) -> Dict[str, Optional[str]]:
        return {
            "current_view": self.current_view.value,
            "selected_blueprint_id": self.selected_blueprint_id,
            "selected_contract_id": self.selected_contract_id,
        }
