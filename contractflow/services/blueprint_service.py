# =====================================================
# FILE: contractflow/services/blueprint_service.py
# Blueprint Repository - blueprints and their field lists
# =====================================================

from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy import desc, select
from typing import List, Optional, Dict, Any, Sequence
import logging

from contractflow.core.exceptions import NotFoundError, StoreError, ValidationError
from contractflow.models.blueprint import Blueprint, BlueprintField
from contractflow.models.contract import Contract, ContractFieldValue
from contractflow.services.field_values import FieldType, FIELD_ROW_HEIGHT
from contractflow.services.workflow_service import READ_ONLY_STATUSES
from contractflow.utils.datetime_helpers import utcnow

logger = logging.getLogger(__name__)


class BlueprintService:
    """
    CRUD over blueprint definitions and their ordered field lists
    """

    def __init__(self, db: Session):
        self.db = db

    # =====================================================
    # READ
    # =====================================================

    def list(self) -> List[Blueprint]:
        """All blueprints, newest first"""
        try:
            return self.db.query(Blueprint).order_by(desc(Blueprint.created_at)).all()
        except SQLAlchemyError as e:
            raise self._store_error("listing blueprints", e)

    def get(self, blueprint_id: str) -> Blueprint:
        """Blueprint with its fields ordered by position_y"""
        try:
            blueprint = self.db.query(Blueprint).filter(Blueprint.id == blueprint_id).first()
        except SQLAlchemyError as e:
            raise self._store_error("loading blueprint", e)

        if not blueprint:
            raise NotFoundError("Blueprint", blueprint_id)
        return blueprint

    def get_fields(self, blueprint_id: str) -> List[BlueprintField]:
        try:
            return self.db.query(BlueprintField).filter(
                BlueprintField.blueprint_id == blueprint_id
            ).order_by(BlueprintField.position_y).all()
        except SQLAlchemyError as e:
            raise self._store_error("loading blueprint fields", e)

    # =====================================================
    # WRITE
    # =====================================================

    def create(
        self,
        name: str,
        description: Optional[str] = "",
        fields: Sequence[Dict[str, Any]] = (),
    ) -> Blueprint:
        """
        Create a blueprint and its fields in one transaction
        """
        name = self._validate(name, fields)

        try:
            blueprint = Blueprint(name=name, description=description or "")
            self.db.add(blueprint)
            self.db.flush()  # Get the ID without committing

            self._insert_fields(blueprint.id, fields)
            self.db.commit()
            self.db.refresh(blueprint)
        except SQLAlchemyError as e:
            raise self._store_error("creating blueprint", e)

        logger.info(f"Blueprint created: {blueprint.id} ({len(fields)} fields)")
        return blueprint

    def update(
        self,
        blueprint_id: str,
        name: str,
        description: Optional[str] = "",
        fields: Sequence[Dict[str, Any]] = (),
    ) -> Blueprint:
        """
        Replace name, description and the whole field list.

        Existing field rows are deleted and the submitted list re-inserted
        with new ids. Contract values keyed to the old ids are left alone
        and can be removed with purge_orphaned_values().
        """
        name = self._validate(name, fields)
        blueprint = self.get(blueprint_id)

        try:
            blueprint.name = name
            blueprint.description = description or ""
            blueprint.updated_at = utcnow()

            removed = self.db.query(BlueprintField).filter(
                BlueprintField.blueprint_id == blueprint_id
            ).delete(synchronize_session=False)

            self._insert_fields(blueprint_id, fields)
            self.db.commit()

            # Field collection was replaced behind the ORM's back
            self.db.expire(blueprint)
            self.db.refresh(blueprint)
        except SQLAlchemyError as e:
            raise self._store_error("updating blueprint", e)

        logger.info(
            f"Blueprint updated: {blueprint_id} (replaced {removed} fields with {len(fields)})"
        )
        return blueprint

    def delete(self, blueprint_id: str) -> None:
        """
        Delete a blueprint; its fields go with it, its contracts stay
        """
        blueprint = self.get(blueprint_id)

        try:
            self.db.delete(blueprint)
            self.db.commit()
        except SQLAlchemyError as e:
            raise self._store_error("deleting blueprint", e)

        logger.info(f"Blueprint deleted: {blueprint_id}")

    def purge_orphaned_values(self, contract_id: Optional[str] = None) -> int:
        """
        Remove contract values whose blueprint field no longer exists.
        Locked and revoked contracts keep their values.
        Returns the number of rows deleted.
        """
        try:
            live_fields = select(BlueprintField.id)
            editable_contracts = select(Contract.id).where(
                Contract.status.notin_([s.value for s in READ_ONLY_STATUSES])
            )
            query = self.db.query(ContractFieldValue).filter(
                ~ContractFieldValue.blueprint_field_id.in_(live_fields),
                ContractFieldValue.contract_id.in_(editable_contracts),
            )
            if contract_id:
                query = query.filter(ContractFieldValue.contract_id == contract_id)

            removed = query.delete(synchronize_session=False)
            self.db.commit()
        except SQLAlchemyError as e:
            raise self._store_error("purging orphaned values", e)

        logger.info(f"Purged {removed} orphaned contract values")
        return removed

    # =====================================================
    # HELPERS
    # =====================================================

    @staticmethod
    def _validate(name: str, fields: Sequence[Dict[str, Any]]) -> str:
        if not name or not name.strip():
            raise ValidationError("Blueprint name is required")

        for index, field in enumerate(fields):
            label = field.get("label") or ""
            if not label.strip():
                raise ValidationError(f"Field {index + 1} needs a label")
            try:
                FieldType(field.get("field_type", FieldType.TEXT))
            except ValueError:
                raise ValidationError(f"Unknown field type: {field.get('field_type')}")

        return name.strip()

    def _insert_fields(self, blueprint_id: str, fields: Sequence[Dict[str, Any]]) -> None:
        for index, field in enumerate(fields):
            position_x = field.get("position_x")
            position_y = field.get("position_y")
            self.db.add(BlueprintField(
                blueprint_id=blueprint_id,
                field_type=FieldType(field.get("field_type", FieldType.TEXT)).value,
                label=field["label"].strip(),
                position_x=0 if position_x is None else position_x,
                position_y=index * FIELD_ROW_HEIGHT if position_y is None else position_y,
            ))
        self.db.flush()

    def _store_error(self, action: str, error: SQLAlchemyError) -> StoreError:
        self.db.rollback()
        logger.error(f"Store failure while {action}: {str(error)}")
        return StoreError(f"Data store error while {action}")
