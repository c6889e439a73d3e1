"""Queries on the FAQ table."""

import logging
import sqlite3
import time
from enum import IntEnum
from typing import Any, Callable, Iterable, Mapping, Sequence

from .database import Database, Page
from .records import FAQ

log = logging.getLogger(__name__)

PENDING_STATUS = 0


class FAQOrderBy(IntEnum):
    CREATED_AT_DESC = 1
    CREATED_AT_ASC = 2
    UPDATED_AT_DESC = 3
    UPDATED_AT_ASC = 4


_ORDERS = {
    FAQOrderBy.CREATED_AT_DESC: ("created_at", True),
    FAQOrderBy.CREATED_AT_ASC: ("created_at", False),
    FAQOrderBy.UPDATED_AT_DESC: ("updated_at", True),
    FAQOrderBy.UPDATED_AT_ASC: ("updated_at", False),
}


class FAQStore:
    """Reads and writes FAQ entries of datasets."""

    def __init__(self, db: Database, clock: Callable[[], float] = time.time) -> None:
        self.db = db
        self._clock = clock

    def _now(self) -> int:
        return int(self._clock())

    def get_by_id(self, faq_id: int) -> FAQ:
        """Return the FAQ with this id."""
        return self.db.first(FAQ, {"id": faq_id})

    def get_by_dataset_id_and_id(self, corp_id: int, dataset_id: int, faq_id: int) -> FAQ:
        """Return the FAQ with this id within a corp's dataset."""
        return self.db.first(FAQ, {"corp_id": corp_id, "id": faq_id, "dataset_id": dataset_id})

    def insert_many(self, faqs: Sequence[FAQ]) -> list[FAQ]:
        """Insert FAQs as given, in one transaction."""
        if not faqs:
            return []
        return self.db.insert_many(faqs)

    def create(self, faq: FAQ) -> FAQ:
        """Insert one FAQ, stamping its creation and update times."""
        now = self._now()
        faq.created_at = now
        faq.updated_at = now
        return self.db.insert(faq)

    def update_status(self, faq_id: int, status: int, error_msg: str) -> None:
        """Set the embedding status and error message of an FAQ."""
        self.db.update(
            FAQ,
            {"id": faq_id},
            {"status": status, "error_msg": error_msg, "updated_at": self._now()},
        )

    def list_pending_by_dataset(self, dataset_id: int) -> list[FAQ]:
        """Enabled FAQs of a dataset still waiting to be embedded."""
        return self.db.select(FAQ, {"dataset_id": dataset_id, "status": PENDING_STATUS, "enabled": True})

    def get_by_content_hash(self, corp_id: int, dataset_id: int, content_hash: str) -> FAQ:
        """Return the FAQ of a dataset with this content hash."""
        return self.db.first(FAQ, {"corp_id": corp_id, "dataset_id": dataset_id, "content_hash": content_hash})

    def batch_update(self, faqs: Iterable[FAQ]) -> None:
        """Write back answer and update time of each FAQ that has an id.

        An empty answer leaves the stored answer unchanged.
        """
        with self.db.transaction():
            for faq in faqs:
                if faq.id == 0:
                    continue
                data: dict[str, Any] = {}
                if faq.answer:
                    data["answer"] = faq.answer
                data["updated_at"] = faq.updated_at
                self.db.update(FAQ, {"id": faq.id}, data)

    def delete_by_id(self, corp_id: int, faq_id: int) -> int:
        """Delete a corp's FAQ; return the number of rows removed."""
        return self.db.delete(FAQ, {"corp_id": corp_id, "id": faq_id})

    def delete_by_dataset_id(self, corp_id: int, dataset_id: int) -> int:
        """Delete all FAQs of a corp's dataset."""
        return self.db.delete(FAQ, {"corp_id": corp_id, "dataset_id": dataset_id})

    def list_with_option(
        self,
        corp_id: int,
        dataset_id: int,
        keyword: str | None = None,
        category_id: int | None = None,
        enabled: bool | None = None,
        order_by: int | None = None,
        page: int = 1,
        page_size: int = 20,
    ) -> Page:
        """List a dataset's FAQs filtered by keyword, category and enabled flag."""
        where: dict[str, Any] = {"corp_id": corp_id, "dataset_id": dataset_id}
        raw = []
        if keyword is not None:
            pattern = f"%{keyword}%"
            raw.append(('"question" LIKE ? OR "answer" LIKE ?', (pattern, pattern)))
        if category_id is not None:
            where["category_id"] = category_id
        if enabled is not None:
            where["enabled"] = enabled
        order = []
        if order_by is not None and order_by in _ORDERS:
            order.append(_ORDERS[FAQOrderBy(order_by)])
        return self.db.paginate(FAQ, where, raw=raw, order_by=order, page=page, page_size=page_size)

    def delete_by_category_id(self, corp_id: int, dataset_id: int, category_id: int) -> int:
        """Delete all FAQs of one category in a corp's dataset."""
        return self.db.delete(FAQ, {"corp_id": corp_id, "dataset_id": dataset_id, "category_id": category_id})

    def list_by_dataset_id(self, corp_id: int, dataset_id: int) -> list[FAQ]:
        """All FAQs of a corp's dataset."""
        return self.db.select(FAQ, {"corp_id": corp_id, "dataset_id": dataset_id})

    def list_by_category_id(self, corp_id: int, dataset_id: int, category_id: int) -> list[FAQ]:
        """All FAQs of one category in a corp's dataset."""
        return self.db.select(FAQ, {"corp_id": corp_id, "dataset_id": dataset_id, "category_id": category_id})

    def update_by_id(self, corp_id: int, faq_id: int, data: Mapping[str, Any]) -> None:
        """Update columns of a corp's FAQ; database errors are logged, not raised."""
        try:
            self.db.update(FAQ, {"corp_id": corp_id, "id": faq_id}, data)
        except sqlite3.Error as exc:
            log.error("update faq %d failed: %s", faq_id, exc)