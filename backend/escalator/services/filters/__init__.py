"""
Filter engine

Column registry, condition evaluator, group combinator, the persisted
configuration store and the filtered dataset provider built on them.
"""

from .columns import (
    ColumnDescriptor,
    UnknownColumnError,
    column_type,
    get_column,
    list_columns,
    operators_for,
)
from .evaluator import evaluate
from .combinator import apply_filters, matches, matches_group
from .errors import DataUnavailable
from .notifications import ChangeNotifier, change_notifier, FILTERS_TOPIC, RECORDS_TOPIC
from .validator import FilterValidationError, ValidationReason, validate_groups
from .store import FilterConfigStore
from .provider import FilteredDatasetProvider, FilteredView

__all__ = [
    "ColumnDescriptor",
    "UnknownColumnError",
    "column_type",
    "get_column",
    "list_columns",
    "operators_for",
    "evaluate",
    "apply_filters",
    "matches",
    "matches_group",
    "DataUnavailable",
    "ChangeNotifier",
    "change_notifier",
    "FILTERS_TOPIC",
    "RECORDS_TOPIC",
    "FilterValidationError",
    "ValidationReason",
    "validate_groups",
    "FilterConfigStore",
    "FilteredDatasetProvider",
    "FilteredView",
]
