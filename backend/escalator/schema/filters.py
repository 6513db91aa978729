# Pydantic schemas for filter conditions, groups and stored configurations.

from pydantic import Field
from typing import Optional, List, Union
from datetime import datetime
from enum import Enum

from escalator.schema.base import CamelModel


class ColumnType(str, Enum):
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"


class Operator(str, Enum):
    EQUALS = "equals"
    CONTAINS = "contains"
    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"
    GREATER_EQUAL = "greater_equal"
    LESS_EQUAL = "less_equal"

    # Column to column comparisons, numeric only
    COLUMN_EQUALS = "column_equals"
    COLUMN_GREATER_THAN = "column_greater_than"
    COLUMN_LESS_THAN = "column_less_than"
    COLUMN_GREATER_EQUAL = "column_greater_equal"
    COLUMN_LESS_EQUAL = "column_less_equal"


class GroupLogic(str, Enum):
    AND = "AND"
    OR = "OR"


FilterValue = Union[bool, int, float, str]


class FilterCondition(CamelModel):
    # operator stays a plain string: unknown operators must reach the evaluator
    column: str
    operator: str
    value: FilterValue = ""
    compare_column: Optional[str] = None


class FilterGroup(CamelModel):
    id: str
    conditions: List[FilterCondition] = Field(default_factory=list)
    logic: GroupLogic = GroupLogic.AND


class FilterConfigRequest(CamelModel):
    filters: List[FilterGroup]


class FilterConfiguration(CamelModel):
    filters: List[FilterGroup]
    updated_at: datetime


class FilterPromptRequest(CamelModel):
    prompt: str = ""


class GeneratedFilters(CamelModel):
    filters: List[FilterGroup]


class FilterPreview(CamelModel):
    total_count: int
    filtered_count: int


class OperatorOption(CamelModel):
    value: Operator
    label: str


class ColumnResponse(CamelModel):
    key: str
    label: str
    type: ColumnType
    operators: List[OperatorOption]
    default_value: FilterValue
