"""
Blueprints API Package
"""
from contractflow.api.api_v1.blueprints.blueprints import router

__all__ = ["router"]
