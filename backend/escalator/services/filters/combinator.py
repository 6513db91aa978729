"""
Filter Group Combinator

Groups are ANDed together; conditions inside a group are combined with the
group's own logic. A group without conditions always matches.
"""

from typing import Any, Iterable, List, Optional, Sequence, TypeVar

from escalator.schema.filters import FilterGroup, GroupLogic
from escalator.services.filters.evaluator import evaluate

T = TypeVar("T")


def matches_group(record: Any, group: FilterGroup) -> bool:
    if not group.conditions:
        return True

    results = (evaluate(record, condition) for condition in group.conditions)

    if group.logic == GroupLogic.OR:
        return any(results)
    return all(results)


def matches(record: Any, groups: Sequence[FilterGroup]) -> bool:
    return all(matches_group(record, group) for group in groups)


def apply_filters(records: Iterable[T], groups: Optional[Sequence[FilterGroup]]) -> List[T]:
    """Return the records that satisfy every group, in their original order.

    An unset or empty configuration lets every record through.
    """
    records = list(records)
    if not groups:
        return records
    return [record for record in records if matches(record, groups)]
