"""Queries on the uploaded file table."""

import time
from typing import Any, Callable, Mapping

from .database import Database
from .records import RagFile


class FileStore:
    """Reads and writes uploaded source files of datasets."""

    def __init__(self, db: Database, clock: Callable[[], float] = time.time) -> None:
        self.db = db
        self._clock = clock

    def _now(self) -> int:
        return int(self._clock())

    def insert(self, file: RagFile) -> RagFile:
        """Insert a file, stamping its creation and update times."""
        file.created_at = self._now()
        file.updated_at = file.created_at
        return self.db.insert(file)

    def update_status(self, file_id: int, status: int, error_msg: str) -> None:
        """Set the processing status and error message of a file."""
        self.db.update(
            RagFile,
            {"id": file_id},
            {"status": status, "error_msg": error_msg, "updated_at": self._now()},
        )

    def get_by_id(self, file_id: int) -> RagFile:
        """Return the file with this id."""
        return self.db.first(RagFile, {"id": file_id})

    def update_data(self, file_id: int, data: Mapping[str, Any] | None) -> int:
        """Update columns of a file, always refreshing its update time; return rows changed."""
        if data is None:
            return 0
        values = dict(data)
        values["updated_at"] = self._now()
        return self.db.update(RagFile, {"id": file_id}, values)

    def delete_by_dataset_id(self, dataset_id: int, corp_id: int | None = None) -> int:
        """Delete the files used by a dataset, optionally only those of one corp."""
        where: dict[str, Any] = {"used_in_dataset_id": dataset_id}
        if corp_id is not None:
            where["corp_id"] = corp_id
        return self.db.delete(RagFile, where)