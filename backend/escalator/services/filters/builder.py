"""
Helpers for editing filter configurations.

They return new objects rather than mutating, and keep every condition
legal for its column: when the column changes, the operator is kept only if
the new column's type allows it, otherwise it falls back to the first legal
operator and the type's default value. The value is also reset to the
default whenever the column type changes.
"""

import uuid
from typing import List, Optional, Sequence

from escalator.schema.filters import ColumnType, FilterCondition, FilterGroup, GroupLogic, Operator
from escalator.services.filters import columns

DEFAULT_GROUP_ID = "default"


def new_condition(column: str = "department") -> FilterCondition:
    type_ = columns.column_type(column)
    return FilterCondition(
        column=column,
        operator=columns.operators_for(type_)[0].value,
        value=columns.default_value_for(type_),
    )


def new_group(
    conditions: Optional[Sequence[FilterCondition]] = None,
    logic: GroupLogic = GroupLogic.AND,
    group_id: Optional[str] = None,
) -> FilterGroup:
    return FilterGroup(
        id=group_id or uuid.uuid4().hex,
        conditions=list(conditions) if conditions is not None else [new_condition()],
        logic=logic,
    )


def default_groups() -> List[FilterGroup]:
    """The overdue rule: Pending Since >= TAT (Days)."""
    overdue = FilterCondition(
        column="pendingSince",
        operator=Operator.COLUMN_GREATER_EQUAL.value,
        value=0,
        compare_column="tatDays",
    )
    return [new_group([overdue], GroupLogic.AND, DEFAULT_GROUP_ID)]


def change_column(condition: FilterCondition, column: str) -> FilterCondition:
    type_ = columns.column_type(column)

    if not columns.is_operator_allowed(column, condition.operator):
        return new_condition(column)

    if columns.has_column(condition.column) and columns.column_type(condition.column) == type_:
        updated = condition.model_copy(update={"column": column})
    else:
        updated = condition.model_copy(update={"column": column, "value": columns.default_value_for(type_)})

    if condition.operator.startswith("column_") and condition.compare_column == column:
        # a column is never compared with itself
        updated = updated.model_copy(update={"compare_column": _other_numeric_column(column)})
    return updated


def _other_numeric_column(column: str) -> str:
    for descriptor in columns.list_columns():
        if descriptor.type == ColumnType.NUMBER and descriptor.key != column:
            return descriptor.key
    raise columns.UnknownColumnError(column)


def add_condition(group: FilterGroup, condition: Optional[FilterCondition] = None) -> FilterGroup:
    return group.model_copy(update={"conditions": [*group.conditions, condition or new_condition()]})


def remove_condition(group: FilterGroup, index: int) -> FilterGroup:
    conditions = [c for i, c in enumerate(group.conditions) if i != index]
    return group.model_copy(update={"conditions": conditions})


def remove_group(groups: Sequence[FilterGroup], group_id: str) -> List[FilterGroup]:
    # the last group is never removed
    if len(groups) <= 1:
        return list(groups)
    return [group for group in groups if group.id != group_id]
