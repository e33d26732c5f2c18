# starchain/validation/__init__.py
from .record import Validation
from .registry import ValidationList

__all__ = ["Validation", "ValidationList"]
