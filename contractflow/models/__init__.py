# =====================================================
# FILE: contractflow/models/__init__.py
# =====================================================

from contractflow.core.database import Base

from contractflow.models.blueprint import Blueprint, BlueprintField
from contractflow.models.contract import Contract, ContractFieldValue

__all__ = [
    "Base",
    "Blueprint",
    "BlueprintField",
    "Contract",
    "ContractFieldValue",
]
