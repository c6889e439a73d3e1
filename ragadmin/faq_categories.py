"""Queries on the FAQ category table."""

import logging
import time
from typing import Any, Callable, Mapping

from .database import Database, NotFoundError
from .records import FAQCategory

log = logging.getLogger(__name__)


class FAQCategoryStore:
    """Reads and writes FAQ categories of datasets."""

    def __init__(self, db: Database, clock: Callable[[], float] = time.time) -> None:
        self.db = db
        self._clock = clock

    def _now(self) -> int:
        return int(self._clock())

    def get_by_name(self, corp_id: int, dataset_id: int, name: str) -> FAQCategory:
        """Return the category with this name in a corp's dataset."""
        try:
            return self.db.first(FAQCategory, {"corp_id": corp_id, "dataset_id": dataset_id, "name": name})
        except NotFoundError as exc:
            log.warning("FAQ category not found: %s", exc)
            raise

    def insert(self, category: FAQCategory) -> int:
        """Insert a category as given and return its id."""
        return self.db.insert(category).id

    def get_or_create(self, corp_id: int, robot_uid: int, dataset_id: int, name: str) -> FAQCategory | None:
        """Return the named category, creating it if missing; None for an empty name."""
        if not name:
            return None
        try:
            return self.get_by_name(corp_id, dataset_id, name)
        except NotFoundError:
            pass
        now = self._now()
        category = FAQCategory(
            corp_id=corp_id,
            robot_uid=robot_uid,
            dataset_id=dataset_id,
            name=name,
            created_at=now,
            updated_at=now,
        )
        self.insert(category)
        return category

    def delete_by_id(self, corp_id: int, dataset_id: int, category_id: int) -> int:
        """Delete a category of a corp's dataset; return the number of rows removed."""
        return self.db.delete(FAQCategory, {"corp_id": corp_id, "dataset_id": dataset_id, "id": category_id})

    def list(self, corp_id: int, dataset_id: int) -> list[FAQCategory]:
        """All categories of a corp's dataset."""
        return self.db.select(FAQCategory, {"corp_id": corp_id, "dataset_id": dataset_id})

    def update_by_id(self, corp_id: int, category_id: int, data: Mapping[str, Any]) -> int:
        """Update columns of a corp's category; return rows changed."""
        return self.db.update(FAQCategory, {"corp_id": corp_id, "id": category_id}, data)