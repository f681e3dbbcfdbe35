"""
Contracts API Package
"""
from contractflow.api.api_v1.contracts.contracts import router

__all__ = ["router"]
