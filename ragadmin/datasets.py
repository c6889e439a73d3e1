"""Queries on the dataset table."""

import time
from enum import IntEnum
from typing import Any, Callable, Mapping

from .database import Database, NotFoundError, Page
from .records import Dataset


class DatasetOrderBy(IntEnum):
    CREATED_AT_DESC = 1
    CREATED_AT_ASC = 2


_EDIT_FIELDS = (
    "robot_uid",
    "name",
    "description",
    "is_public",
    "provider",
    "permission",
    "data_source_type",
    "indexing_technique",
    "index_struct",
    "embedding_model",
    "embedding_model_provider",
    "retrieval_model",
    "built_in_field_enabled",
    "collection_name",
    "is_default",
)


class DatasetStore:
    """Reads and writes datasets, scoped by corp where the query needs it."""

    def __init__(self, db: Database, clock: Callable[[], float] = time.time) -> None:
        self.db = db
        self._clock = clock

    def _now(self) -> int:
        return int(self._clock())

    def list_with_option(
        self,
        corp_id: int,
        name_like: str | None = None,
        is_public: bool | None = None,
        order_by: int | None = None,
        page: int = 1,
        page_size: int = 20,
    ) -> Page:
        """List a corp's datasets with optional name, visibility and ordering filters."""
        where: dict[str, Any] = {"corp_id": corp_id}
        raw = []
        if name_like is not None:
            raw.append(('"name" LIKE ?', (f"%{name_like}%",)))
        if is_public is not None:
            where["is_public"] = is_public
        order = []
        if order_by == DatasetOrderBy.CREATED_AT_DESC:
            order.append(("created_at", True))
        elif order_by == DatasetOrderBy.CREATED_AT_ASC:
            order.append(("created_at", False))
        return self.db.paginate(Dataset, where, raw=raw, order_by=order, page=page, page_size=page_size)

    def get_by_id(self, dataset_id: int) -> Dataset:
        """Return the dataset with this id."""
        return self.db.first(Dataset, {"id": dataset_id})

    def get_by_corp_id_and_id(self, corp_id: int, dataset_id: int) -> Dataset:
        """Return the dataset with this id if it belongs to the corp."""
        return self.db.first(Dataset, {"corp_id": corp_id, "id": dataset_id})

    def delete_by_id(self, corp_id: int, dataset_id: int) -> int:
        """Delete a corp's dataset; return the number of rows removed."""
        return self.db.delete(Dataset, {"corp_id": corp_id, "id": dataset_id})

    def get_by_corp_id_and_name(self, corp_id: int, name: str) -> Dataset:
        """Return the corp's dataset with this name."""
        return self.db.first(Dataset, {"corp_id": corp_id, "name": name})

    def create(self, dataset: Dataset) -> Dataset:
        """Insert a dataset, stamping its creation and update times."""
        now = self._now()
        dataset.created_at = now
        dataset.updated_at = now
        return self.db.insert(dataset)

    def update_by_id(self, dataset_id: int, data: Mapping[str, Any]) -> int:
        """Update columns of a dataset and its update time; return rows changed."""
        values = dict(data)
        values["updated_at"] = self._now()
        return self.db.update(Dataset, {"id": dataset_id}, values)

    def edit(self, dataset: Dataset) -> Dataset:
        """Update the dataset with the same corp and name, or create it."""
        now = self._now()
        condition = {"corp_id": dataset.corp_id, "name": dataset.name}
        data = {name: getattr(dataset, name) for name in _EDIT_FIELDS}
        data["updated_at"] = now
        with self.db.transaction():
            try:
                existing = self.db.first(Dataset, condition)
            except NotFoundError:
                return self.db.insert(Dataset(**{**condition, **data, "created_at": now}))
            self.db.update(Dataset, {"id": existing.id}, data)
            return self.db.first(Dataset, {"id": existing.id})

    def check_default_exists(self, corp_id: int) -> bool:
        """Whether the corp already has a default dataset."""
        return self.db.count(Dataset, {"corp_id": corp_id, "is_default": True}) > 0