"""
Navigation API Package
"""
from contractflow.api.api_v1.navigation.router import router

__all__ = ["router"]
