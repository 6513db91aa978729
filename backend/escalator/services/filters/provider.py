"""
Filtered Dataset Provider

Read-and-combine facade over the stored records and the stored filter
configuration. It keeps the last computed view and recomputes it when
records change, when the filter configuration changes, or when a caller
asks for a refresh (a view regaining focus). Recomputation is a linear scan
with no side effects, so a superseded run is simply replaced.
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from escalator.crud import crud_record
from escalator.database import SessionLocal
from escalator.schema.filters import FilterGroup
from escalator.schema.record import RecordResponse
from escalator.services.filters.combinator import apply_filters
from escalator.services.filters.errors import DataUnavailable
from escalator.services.filters.notifications import (
    FILTERS_TOPIC,
    RECORDS_TOPIC,
    ChangeNotifier,
    change_notifier,
)
from escalator.services.filters.store import FilterConfigStore

logger = logging.getLogger(__name__)


@dataclass
class FilteredView:
    records: List[RecordResponse] = field(default_factory=list)
    total_count: int = 0
    filtered_count: int = 0
    applied_config: Optional[List[FilterGroup]] = None
    departments: List[str] = field(default_factory=list)


class FilteredDatasetProvider:

    def __init__(
        self,
        session_factory: Callable[[], Session] = SessionLocal,
        store: Optional[FilterConfigStore] = None,
        notifier: ChangeNotifier = change_notifier,
    ):
        self.session_factory = session_factory
        self.store = store or FilterConfigStore(session_factory, notifier)
        self.notifier = notifier

        self._view: Optional[FilteredView] = None
        self._lock = threading.Lock()
        self._generation = 0
        self._completed_generation = 0

        self._unsubscribers = [
            notifier.subscribe(RECORDS_TOPIC, self._on_change),
            notifier.subscribe(FILTERS_TOPIC, self._on_change),
        ]

    def _on_change(self, topic: str) -> None:
        logger.debug(f"Recomputing filtered view after '{topic}' change")
        try:
            self.refresh()
        except DataUnavailable as e:
            logger.warning(f"Keeping previous view, refresh after '{topic}' failed: {e}")

    def _fetch_records(self) -> Tuple[List[RecordResponse], List[str]]:
        db = self.session_factory()
        try:
            records = [RecordResponse.model_validate(r) for r in crud_record.get_all_records(db)]
            departments = crud_record.get_departments(db)
            return records, departments
        except SQLAlchemyError as e:
            logger.error(f"Failed to load records: {e}")
            raise DataUnavailable("Failed to fetch records") from e
        finally:
            db.close()

    def refresh(self) -> FilteredView:
        """Recompute the view from a fresh snapshot.

        Raises:
            DataUnavailable: records could not be read; the previous view is kept
        """
        with self._lock:
            self._generation += 1
            generation = self._generation

        records, departments = self._fetch_records()
        config = self.store.load()

        if config is None:
            applied: Optional[List[FilterGroup]] = None
            visible = records
        else:
            applied = config.filters
            visible = apply_filters(records, applied)

        view = FilteredView(
            records=visible,
            total_count=len(records),
            filtered_count=len(visible),
            applied_config=applied,
            departments=departments,
        )

        with self._lock:
            # results of an older run never replace a newer completed one
            if generation > self._completed_generation:
                self._view = view
                self._completed_generation = generation
            return self._view

    def get_view(self) -> FilteredView:
        with self._lock:
            view = self._view
        if view is None:
            return self.refresh()
        return view

    def preview(self, groups: Optional[List[FilterGroup]]) -> FilteredView:
        """Apply candidate groups to the current records without storing them."""
        records, departments = self._fetch_records()
        visible = apply_filters(records, groups)
        return FilteredView(
            records=visible,
            total_count=len(records),
            filtered_count=len(visible),
            applied_config=groups or None,
            departments=departments,
        )

    def close(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []
