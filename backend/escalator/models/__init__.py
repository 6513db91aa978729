"""
Models Package

Exports all SQLAlchemy models for the escalation tracker.
"""

from escalator.database import Base, engine

from .upload import Upload
from .record import EscalationRecord
from .filter_configuration import FilterConfigurationRow


__all__ = [
    "Base",
    "engine",
    "Upload",
    "EscalationRecord",
    "FilterConfigurationRow",
]
