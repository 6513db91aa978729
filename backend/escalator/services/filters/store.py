"""
Filter Configuration Store

Owns the single persisted filter configuration.

States: unset -> set via save()/reset(); set -> set via save()/reset();
set -> unset via clear(). A fresh database starts unset.

Every write commits first and publishes a ``filters`` notification after,
so observers never re-read a half-written configuration. Concurrent writers
race with last-writer-wins.
"""

import logging
from contextlib import contextmanager
from typing import Callable, Iterator, List, Optional, Sequence

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from escalator.crud import crud_filter_config
from escalator.database import SessionLocal
from escalator.schema.filters import FilterConfiguration, FilterGroup
from escalator.services.filters.builder import default_groups
from escalator.services.filters.errors import DataUnavailable
from escalator.services.filters.notifications import FILTERS_TOPIC, ChangeNotifier, change_notifier
from escalator.services.filters.validator import FilterValidationError, validate_groups

logger = logging.getLogger(__name__)


class FilterConfigStore:

    def __init__(
        self,
        session_factory: Callable[[], Session] = SessionLocal,
        notifier: ChangeNotifier = change_notifier,
    ):
        self.session_factory = session_factory
        self.notifier = notifier

    @contextmanager
    def _session(self) -> Iterator[Session]:
        db = self.session_factory()
        try:
            yield db
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Filter configuration storage failed: {e}")
            raise DataUnavailable("Filter configuration storage is unavailable") from e
        finally:
            db.close()

    @staticmethod
    def default_configuration() -> List[FilterGroup]:
        return default_groups()

    def load(self) -> Optional[FilterConfiguration]:
        with self._session() as db:
            row = crud_filter_config.get_filter_config(db)

            if row is None:
                return None

            try:
                groups = [FilterGroup.model_validate(group) for group in row.groups]
                validate_groups(groups)
            except (ValidationError, TypeError, FilterValidationError) as e:
                logger.warning(f"Stored filter configuration is unreadable, treating as unset: {e}")
                return None

            return FilterConfiguration(filters=groups, updated_at=row.updated_at)

    def is_set(self) -> bool:
        with self._session() as db:
            return crud_filter_config.get_filter_config(db) is not None

    def save(self, groups: Sequence[FilterGroup]) -> FilterConfiguration:
        """Validate and store ``groups`` wholesale, then notify observers.

        Raises:
            FilterValidationError: a condition does not fit the column registry
            DataUnavailable: the write failed; nothing is published
        """
        groups = list(groups)
        validate_groups(groups)

        payload = [group.model_dump(mode="json", by_alias=True, exclude_none=True) for group in groups]

        with self._session() as db:
            row = crud_filter_config.upsert_filter_config(db, payload)
            stored = FilterConfiguration(filters=groups, updated_at=row.updated_at)

        logger.info(f"Saved filter configuration with {len(groups)} group(s)")
        self.notifier.publish(FILTERS_TOPIC)

        return stored

    def reset(self) -> FilterConfiguration:
        return self.save(self.default_configuration())

    def clear(self) -> None:
        with self._session() as db:
            crud_filter_config.delete_filter_config(db)

        logger.info("Cleared filter configuration")
        self.notifier.publish(FILTERS_TOPIC)

    def ensure_default(self) -> FilterConfiguration:
        """Return the stored configuration, creating the default one when unset."""
        current = self.load()
        if current is not None:
            return current
        return self.reset()
