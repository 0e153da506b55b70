"""
Utility helpers.
"""
from .result import ServiceResult

__all__ = ["ServiceResult"]
