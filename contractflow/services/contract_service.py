# =====================================================
# FILE: contractflow/services/contract_service.py
# Contract Repository - contracts, field values, status changes
# =====================================================

from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy import desc
from dataclasses import dataclass, field
from typing import List, Optional, Dict, Any
import logging

from contractflow.core.exceptions import (
    ContractLockedError,
    NotFoundError,
    StoreError,
    ValidationError,
)
from contractflow.models.blueprint import Blueprint, BlueprintField
from contractflow.models.contract import Contract, ContractFieldValue
from contractflow.services import workflow_service
from contractflow.services.field_values import default_value, normalize_value
from contractflow.services.workflow_service import ContractStatus
from contractflow.utils.datetime_helpers import utcnow

logger = logging.getLogger(__name__)


@dataclass
class ContractDetail:
    """Everything the contract view needs in one read"""

    contract: Contract
    blueprint: Optional[Blueprint]
    fields: List[BlueprintField]
    values: Dict[str, str]
    # Values whose blueprint field was removed by a later blueprint edit
    orphaned_values: Dict[str, str] = field(default_factory=dict)

    @property
    def is_editable(self) -> bool:
        return workflow_service.is_editable(self.contract.status)

    @property
    def available_transitions(self) -> List[ContractStatus]:
        return workflow_service.available_transitions(self.contract.status)

    @property
    def orphaned_value_count(self) -> int:
        return len(self.orphaned_values)


@dataclass
class Dashboard:
    contracts: List[Contract]
    blueprints: Dict[str, Blueprint]
    counts: Dict[str, int] = field(default_factory=dict)


class ContractService:
    """Contract business logic service"""

    def __init__(self, db: Session):
        self.db = db

    # =====================================================
    # LIST / DASHBOARD
    # =====================================================

    def list_with_blueprints(self):
        """
        Contracts newest first, paired with their blueprint. Contracts whose
        blueprint no longer exists are dropped.
        """
        try:
            contracts = self.db.query(Contract).order_by(desc(Contract.created_at)).all()

            blueprint_ids = {c.blueprint_id for c in contracts}
            blueprints = {}
            if blueprint_ids:
                blueprints = {
                    b.id: b for b in self.db.query(Blueprint).filter(
                        Blueprint.id.in_(blueprint_ids)
                    ).all()
                }
        except SQLAlchemyError as e:
            raise self._store_error("listing contracts", e)

        joined = [c for c in contracts if c.blueprint_id in blueprints]
        if len(joined) != len(contracts):
            logger.debug(f"Skipped {len(contracts) - len(joined)} contracts with missing blueprints")
        return joined, blueprints

    def list(self, group: str = "all") -> List[Contract]:
        contracts, _ = self.list_with_blueprints()
        return workflow_service.filter_by_group(contracts, group)

    def dashboard(self, group: str = "all") -> Dashboard:
        """Filtered contract list plus per-group counts over all listed contracts"""
        workflow_service.statuses_in_group(group)

        contracts, blueprints = self.list_with_blueprints()
        return Dashboard(
            contracts=workflow_service.filter_by_group(contracts, group),
            blueprints=blueprints,
            counts=workflow_service.count_by_group(contracts),
        )

    # =====================================================
    # GET
    # =====================================================

    def get_contract(self, contract_id: str) -> Contract:
        try:
            contract = self.db.query(Contract).filter(Contract.id == contract_id).first()
        except SQLAlchemyError as e:
            raise self._store_error("loading contract", e)

        if not contract:
            raise NotFoundError("Contract", contract_id)
        return contract

    def get(self, contract_id: str) -> ContractDetail:
        contract = self.get_contract(contract_id)

        try:
            blueprint = self.db.query(Blueprint).filter(
                Blueprint.id == contract.blueprint_id
            ).first()

            fields = self.db.query(BlueprintField).filter(
                BlueprintField.blueprint_id == contract.blueprint_id
            ).order_by(BlueprintField.position_y).all()

            value_rows = self.db.query(ContractFieldValue).filter(
                ContractFieldValue.contract_id == contract_id
            ).all()
        except SQLAlchemyError as e:
            raise self._store_error("loading contract", e)

        live = {f.id for f in fields}
        return ContractDetail(
            contract=contract,
            blueprint=blueprint,
            fields=fields,
            values={r.blueprint_field_id: r.value for r in value_rows if r.blueprint_field_id in live},
            orphaned_values={
                r.blueprint_field_id: r.value for r in value_rows if r.blueprint_field_id not in live
            },
        )

    # =====================================================
    # CREATE
    # =====================================================

    def create(
        self,
        name: str,
        blueprint_id: str,
        initial_values: Optional[Dict[str, Any]] = None,
    ) -> Contract:
        """
        Create a contract in status 'created' with one value row per
        blueprint field, all in one transaction
        """
        initial_values = initial_values or {}

        if not name or not name.strip():
            raise ValidationError("Contract name is required")
        if not blueprint_id:
            raise ValidationError("A blueprint must be selected")

        try:
            blueprint = self.db.query(Blueprint).filter(Blueprint.id == blueprint_id).first()
        except SQLAlchemyError as e:
            raise self._store_error("loading blueprint", e)
        if not blueprint:
            raise ValidationError(f"Blueprint {blueprint_id} does not exist")

        fields = {f.id: f for f in blueprint.fields}
        unknown = [field_id for field_id in initial_values if field_id not in fields]
        if unknown:
            raise ValidationError(
                f"Fields not part of blueprint '{blueprint.name}': {', '.join(sorted(unknown))}"
            )

        values = {}
        for field_id, blueprint_field in fields.items():
            if field_id in initial_values:
                values[field_id] = normalize_value(
                    blueprint_field.field_type, initial_values[field_id], blueprint_field.label
                )
            else:
                values[field_id] = default_value(blueprint_field.field_type)

        try:
            contract = Contract(
                name=name.strip(),
                blueprint_id=blueprint_id,
                status=ContractStatus.CREATED.value,
            )
            self.db.add(contract)
            self.db.flush()  # Get the ID without committing

            for field_id, value in values.items():
                self.db.add(ContractFieldValue(
                    contract_id=contract.id,
                    blueprint_field_id=field_id,
                    value=value,
                ))
            self.db.commit()
        except SQLAlchemyError as e:
            raise self._store_error("creating contract", e)

        logger.info(f"Contract created: {contract.id} from blueprint {blueprint_id}")
        return contract

    # =====================================================
    # UPDATE
    # =====================================================

    def update_field_values(self, contract_id: str, values: Dict[str, Any]) -> ContractDetail:
        """
        Save edited values. Rejected without touching any row when the
        contract is locked or revoked.
        """
        detail = self.get(contract_id)
        contract = detail.contract

        if not detail.is_editable:
            raise ContractLockedError(contract.id, contract.status)

        fields = {f.id: f for f in detail.fields}
        stale = [field_id for field_id in values if field_id in detail.orphaned_values]
        if stale:
            # Left over from a blueprint edit; kept as they are until purged
            logger.debug(f"Contract {contract_id}: ignoring {len(stale)} orphaned field values")
            values = {k: v for k, v in values.items() if k not in detail.orphaned_values}

        unknown = [field_id for field_id in values if field_id not in fields]
        if unknown:
            raise ValidationError(f"Unknown fields for this contract: {', '.join(sorted(unknown))}")

        normalized = {
            field_id: normalize_value(fields[field_id].field_type, value, fields[field_id].label)
            for field_id, value in values.items()
        }

        try:
            rows = {
                row.blueprint_field_id: row
                for row in self.db.query(ContractFieldValue).filter(
                    ContractFieldValue.contract_id == contract_id
                ).all()
            }
            now = utcnow()
            for field_id, value in normalized.items():
                row = rows.get(field_id)
                if row is None:
                    # Field added to the blueprint after this contract was created
                    self.db.add(ContractFieldValue(
                        contract_id=contract_id,
                        blueprint_field_id=field_id,
                        value=value,
                    ))
                else:
                    row.value = value
                    row.updated_at = now
            self.db.commit()
        except SQLAlchemyError as e:
            raise self._store_error("saving contract values", e)

        logger.info(f"Contract {contract_id}: saved {len(normalized)} field values")
        return self.get(contract_id)

    def change_status(self, contract_id: str, requested: str) -> Contract:
        """
        Apply one workflow transition; only status and updated_at change
        """
        contract = self.get_contract(contract_id)
        new_status = workflow_service.transition(contract.status, requested)

        previous = contract.status
        try:
            contract.status = new_status.value
            contract.updated_at = utcnow()
            self.db.commit()
        except SQLAlchemyError as e:
            raise self._store_error("changing contract status", e)

        logger.info(f"Contract {contract_id}: status {previous} -> {new_status.value}")
        return contract

    def _store_error(self, action: str, error: SQLAlchemyError) -> StoreError:
        self.db.rollback()
        logger.error(f"Store failure while {action}: {str(error)}")
        return StoreError(f"Data store error while {action}")
