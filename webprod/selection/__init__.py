"""Selection model, validation and structured projection."""

from .model import SelectionEntry, SelectionError, SelectionModel, normalize_value
from .projector import StructuredRecord, is_empty_value, project, resolve_value
from .validator import Violation, ViolationKind, find_violations, validate

__all__ = [
    # Model
    "SelectionEntry",
    "SelectionError",
    "SelectionModel",
    "normalize_value",
    # Projection
    "StructuredRecord",
    "project",
    "resolve_value",
    "is_empty_value",
    # Validation
    "Violation",
    "ViolationKind",
    "find_violations",
    "validate",
]
