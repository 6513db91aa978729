"""
Filter Condition Evaluator

Evaluates one condition against one record. Evaluation is total: it never
raises, whatever the condition holds, because configurations come from users
and from a generative model and a bad one must not block the view.

Coercion rules:
- Numeric branches coerce with ``to_number``. Missing values become 0,
  anything that is not a number becomes NaN, and NaN compares false under
  every operator (``column_equals`` included).
- Text branches coerce with ``to_text``. Missing values become "".
- Unknown operators pass (return True), and so does a column comparison
  that names no compare column.
"""

import math
import operator as op
from typing import Any, Callable, Dict

from escalator.schema.filters import ColumnType, FilterCondition, Operator
from escalator.services.filters import columns

NAN = float("nan")

_RELATIONS: Dict[str, Callable[[float, float], bool]] = {
    Operator.EQUALS.value: op.eq,
    Operator.GREATER_THAN.value: op.gt,
    Operator.LESS_THAN.value: op.lt,
    Operator.GREATER_EQUAL.value: op.ge,
    Operator.LESS_EQUAL.value: op.le,
}

_COLUMN_RELATIONS: Dict[str, Callable[[float, float], bool]] = {
    Operator.COLUMN_EQUALS.value: op.eq,
    Operator.COLUMN_GREATER_THAN.value: op.gt,
    Operator.COLUMN_LESS_THAN.value: op.lt,
    Operator.COLUMN_GREATER_EQUAL.value: op.ge,
    Operator.COLUMN_LESS_EQUAL.value: op.le,
}


def to_number(value: Any) -> float:
    if value is None:
        return 0.0
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, (int, float)):
        return float(value)
    text = str(value).strip()
    if not text:
        return 0.0
    try:
        number = float(text)
    except ValueError:
        return NAN
    # "inf" and "nan" spellings are not day counts
    if not math.isfinite(number):
        return NAN
    return number


def to_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _read(record: Any, key: str) -> Any:
    accessor = columns.ACCESSORS.get(key)
    if accessor is None:
        return None
    return accessor(record)


def _column_type(key: str) -> ColumnType:
    if not columns.has_column(key):
        return ColumnType.STRING
    return columns.column_type(key)


def evaluate(record: Any, condition: FilterCondition) -> bool:
    operator = str(getattr(condition.operator, "value", condition.operator))
    record_value = _read(record, condition.column)

    if operator.startswith("column_") and condition.compare_column:
        relation = _COLUMN_RELATIONS.get(operator)
        if relation is None:
            return True
        left = to_number(record_value)
        right = to_number(_read(record, condition.compare_column))
        return relation(left, right)

    if operator == Operator.EQUALS.value:
        if _column_type(condition.column) == ColumnType.BOOLEAN:
            target = to_text(condition.value) == "true"
            return bool(record_value) is target
        return to_text(record_value).lower() == to_text(condition.value).lower()

    if operator == Operator.CONTAINS.value:
        return to_text(condition.value).lower() in to_text(record_value).lower()

    relation = _RELATIONS.get(operator)
    if relation is not None:
        return relation(to_number(record_value), to_number(condition.value))

    return True
