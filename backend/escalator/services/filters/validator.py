"""
Configuration validator

Every producer of filter configurations (the HTTP API, the reset default,
the natural-language translator) is checked here against the column
registry before anything is stored or returned.
"""

import math
from enum import Enum
from typing import Sequence

from escalator.schema.filters import ColumnType, FilterCondition, FilterGroup, Operator
from escalator.services.filters import columns
from escalator.services.filters.evaluator import to_number


class ValidationReason(str, Enum):
    UNKNOWN_COLUMN = "unknown_column"
    OPERATOR_TYPE_MISMATCH = "operator_type_mismatch"
    MISSING_COMPARE_COLUMN = "missing_compare_column"
    UNEXPECTED_COMPARE_COLUMN = "unexpected_compare_column"
    COMPARE_COLUMN_NOT_NUMERIC = "compare_column_not_numeric"
    COMPARE_COLUMN_SAME_AS_COLUMN = "compare_column_same_as_column"
    NON_NUMERIC_VALUE = "non_numeric_value"
    DUPLICATE_GROUP_ID = "duplicate_group_id"


class FilterValidationError(ValueError):

    def __init__(self, reason: ValidationReason, message: str):
        super().__init__(message)
        self.reason = reason
        self.message = message


_NUMERIC_LITERAL_OPERATORS = {
    Operator.GREATER_THAN.value,
    Operator.LESS_THAN.value,
    Operator.GREATER_EQUAL.value,
    Operator.LESS_EQUAL.value,
}


def validate_condition(condition: FilterCondition) -> None:
    if not columns.has_column(condition.column):
        raise FilterValidationError(
            ValidationReason.UNKNOWN_COLUMN,
            f"Invalid column: {condition.column}"
        )

    type_ = columns.column_type(condition.column)
    if not columns.is_operator_allowed(condition.column, condition.operator):
        raise FilterValidationError(
            ValidationReason.OPERATOR_TYPE_MISMATCH,
            f"Invalid operator for {condition.column}: {condition.operator}"
        )

    is_column_compare = condition.operator.startswith("column_")

    if is_column_compare:
        if not condition.compare_column:
            raise FilterValidationError(
                ValidationReason.MISSING_COMPARE_COLUMN,
                f"Operator {condition.operator} on {condition.column} needs a compareColumn"
            )
        if not columns.has_column(condition.compare_column):
            raise FilterValidationError(
                ValidationReason.UNKNOWN_COLUMN,
                f"Invalid column: {condition.compare_column}"
            )
        if columns.column_type(condition.compare_column) != ColumnType.NUMBER:
            raise FilterValidationError(
                ValidationReason.COMPARE_COLUMN_NOT_NUMERIC,
                f"compareColumn {condition.compare_column} is not numeric"
            )
        if condition.compare_column == condition.column:
            raise FilterValidationError(
                ValidationReason.COMPARE_COLUMN_SAME_AS_COLUMN,
                f"Column {condition.column} cannot be compared with itself"
            )
        return

    if condition.compare_column:
        raise FilterValidationError(
            ValidationReason.UNEXPECTED_COMPARE_COLUMN,
            f"Operator {condition.operator} does not take a compareColumn"
        )

    numeric_literal = condition.operator in _NUMERIC_LITERAL_OPERATORS or (
        type_ == ColumnType.NUMBER and condition.operator == Operator.EQUALS.value
    )
    if numeric_literal and (
        isinstance(condition.value, bool) or math.isnan(to_number(condition.value))
    ):
        raise FilterValidationError(
            ValidationReason.NON_NUMERIC_VALUE,
            f"Value for {condition.column} {condition.operator} must be a number, got: {condition.value!r}"
        )


def validate_groups(groups: Sequence[FilterGroup]) -> None:
    seen_ids = set()
    for group in groups:
        if group.id in seen_ids:
            raise FilterValidationError(
                ValidationReason.DUPLICATE_GROUP_ID,
                f"Duplicate filter group id: {group.id}"
            )
        seen_ids.add(group.id)

        for condition in group.conditions:
            validate_condition(condition)
