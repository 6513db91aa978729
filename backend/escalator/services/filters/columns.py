"""
Column Schema Registry

Static description of every filterable record field and the operators that
are legal for each value type. The evaluator, the configuration validator
and the natural-language translator all read from this table.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Callable, Dict, List

from escalator.schema.filters import ColumnType, Operator


class UnknownColumnError(KeyError):
    """Raised when a column key is not in the registry."""
    pass


@dataclass(frozen=True)
class ColumnDescriptor:
    key: str          # wire key, e.g. "pendingSince"
    label: str        # header text in the uploaded sheet
    type: ColumnType
    attribute: str    # attribute on ORM rows and schemas, e.g. "pending_since"

    def read(self, record: Any) -> Any:
        """Read this column from an ORM row, a schema object or a wire dict."""
        if isinstance(record, Mapping):
            return record.get(self.key)
        return getattr(record, self.attribute, None)


COLUMNS: List[ColumnDescriptor] = [
    ColumnDescriptor("department", "Department", ColumnType.STRING, "department"),
    ColumnDescriptor("fileActivity", "File/Activity", ColumnType.STRING, "file_activity"),
    ColumnDescriptor("currentLevel", "Current Level", ColumnType.STRING, "current_level"),
    ColumnDescriptor("pendingSince", "Pending Since (Days)", ColumnType.NUMBER, "pending_since"),
    ColumnDescriptor("tatDays", "TAT (Days)", ColumnType.NUMBER, "tat_days"),
    ColumnDescriptor("nextLevel", "Next Level", ColumnType.STRING, "next_level"),
    ColumnDescriptor("escalationEmail", "Escalation Authority Email", ColumnType.STRING, "escalation_email"),
    ColumnDescriptor("remarks", "Remarks", ColumnType.STRING, "remarks"),
    ColumnDescriptor("mailSent", "Mail Sent Status", ColumnType.BOOLEAN, "mail_sent"),
]

_COLUMNS_BY_KEY: Dict[str, ColumnDescriptor] = {column.key: column for column in COLUMNS}

# Typed accessor per column key
ACCESSORS: Dict[str, Callable[[Any], Any]] = {column.key: column.read for column in COLUMNS}

OPERATORS: Dict[ColumnType, List[Operator]] = {
    ColumnType.STRING: [Operator.EQUALS, Operator.CONTAINS],
    ColumnType.NUMBER: [
        Operator.EQUALS,
        Operator.GREATER_THAN,
        Operator.LESS_THAN,
        Operator.GREATER_EQUAL,
        Operator.LESS_EQUAL,
        Operator.COLUMN_EQUALS,
        Operator.COLUMN_GREATER_THAN,
        Operator.COLUMN_LESS_THAN,
        Operator.COLUMN_GREATER_EQUAL,
        Operator.COLUMN_LESS_EQUAL,
    ],
    ColumnType.BOOLEAN: [Operator.EQUALS],
}

OPERATOR_LABELS: Dict[Operator, str] = {
    Operator.EQUALS: "Equals",
    Operator.CONTAINS: "Contains",
    Operator.GREATER_THAN: "Greater than",
    Operator.LESS_THAN: "Less than",
    Operator.GREATER_EQUAL: "Greater than or equal",
    Operator.LESS_EQUAL: "Less than or equal",
    Operator.COLUMN_EQUALS: "Equals column",
    Operator.COLUMN_GREATER_THAN: "Greater than column",
    Operator.COLUMN_LESS_THAN: "Less than column",
    Operator.COLUMN_GREATER_EQUAL: "Greater than or equal to column",
    Operator.COLUMN_LESS_EQUAL: "Less than or equal to column",
}

DEFAULT_VALUES: Dict[ColumnType, Any] = {
    ColumnType.STRING: "",
    ColumnType.NUMBER: 0,
    ColumnType.BOOLEAN: False,
}


def list_columns() -> List[ColumnDescriptor]:
    return list(COLUMNS)


def get_column(key: str) -> ColumnDescriptor:
    try:
        return _COLUMNS_BY_KEY[key]
    except KeyError:
        raise UnknownColumnError(key) from None


def has_column(key: str) -> bool:
    return key in _COLUMNS_BY_KEY


def column_type(key: str) -> ColumnType:
    return get_column(key).type


def operators_for(type_: ColumnType) -> List[Operator]:
    return list(OPERATORS[ColumnType(type_)])


def is_operator_allowed(key: str, operator: str) -> bool:
    if not has_column(key):
        return False
    return operator in {op.value for op in OPERATORS[column_type(key)]}


def default_value_for(type_: ColumnType) -> Any:
    return DEFAULT_VALUES[ColumnType(type_)]


def accessor_for(key: str) -> Callable[[Any], Any]:
    return get_column(key).read
