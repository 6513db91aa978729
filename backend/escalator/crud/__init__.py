"""
CRUD Package

Exports all CRUD operation modules for the escalation tracker.
"""

from escalator.crud import crud_record
from escalator.crud import crud_filter_config


__all__ = [
    "crud_record",
    "crud_filter_config",
]
