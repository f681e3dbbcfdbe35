# =====================================================
# FILE: contractflow/models/contract.py
# Contract and Contract Field Value Models
# =====================================================

from sqlalchemy import Column, String, Text, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from contractflow.core.database import Base
from contractflow.models.blueprint import generate_id
from contractflow.utils.datetime_helpers import utcnow


class Contract(Base):
    """
    A blueprint instantiated with concrete values and a lifecycle status.

    blueprint_id is a plain reference, not a foreign key: deleting a
    blueprint leaves its contracts in place.
    """

    __tablename__ = "contracts"

    id = Column(String(36), primary_key=True, default=generate_id)
    name = Column(String(255), nullable=False)
    blueprint_id = Column(String(36), nullable=False, index=True)
    status = Column(String(20), nullable=False, default="created", index=True)
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    field_values = relationship(
        "ContractFieldValue",
        back_populates="contract",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self):
        return f"<Contract(id={self.id}, name='{self.name}', status='{self.status}')>"


class ContractFieldValue(Base):
    __tablename__ = "contract_field_values"
    __table_args__ = (
        UniqueConstraint("contract_id", "blueprint_field_id", name="uq_contract_field"),
    )

    id = Column(String(36), primary_key=True, default=generate_id)
    contract_id = Column(
        String(36),
        ForeignKey("contracts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # Snapshot of the field id at contract creation; may outlive the field
    blueprint_field_id = Column(String(36), nullable=False, index=True)
    value = Column(Text, nullable=False, default="")
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    contract = relationship("Contract", back_populates="field_values")

    def __repr__(self):
        return f"<ContractFieldValue(contract_id={self.contract_id}, field_id={self.blueprint_field_id})>"
