# =====================================================
# FILE: contractflow/models/blueprint.py
# Blueprint and Blueprint Field Models
# =====================================================

from sqlalchemy import Column, String, Float, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship
import uuid

from contractflow.core.database import Base
from contractflow.utils.datetime_helpers import utcnow


def generate_id() -> str:
    return str(uuid.uuid4())


class Blueprint(Base):
    """
    Reusable contract template: a name, a description and an ordered list
    of typed fields. Fields are deleted with their blueprint.
    """

    __tablename__ = "blueprints"

    id = Column(String(36), primary_key=True, default=generate_id)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    fields = relationship(
        "BlueprintField",
        back_populates="blueprint",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="BlueprintField.position_y",
    )

    def __repr__(self):
        return f"<Blueprint(id={self.id}, name='{self.name}')>"


class BlueprintField(Base):
    __tablename__ = "blueprint_fields"

    id = Column(String(36), primary_key=True, default=generate_id)
    blueprint_id = Column(
        String(36),
        ForeignKey("blueprints.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    field_type = Column(String(20), nullable=False, default="text")
    label = Column(String(255), nullable=False)

    # Layout hints for the form designer
    position_x = Column(Float, nullable=False, default=0)
    position_y = Column(Float, nullable=False, default=0)

    created_at = Column(DateTime, nullable=False, default=utcnow)

    blueprint = relationship("Blueprint", back_populates="fields")

    def __repr__(self):
        return f"<BlueprintField(id={self.id}, label='{self.label}', type='{self.field_type}')>"
