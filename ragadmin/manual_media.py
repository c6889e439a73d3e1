"""Queries on manually uploaded materials and their links to FAQs."""

import time
from typing import Callable

from .database import Database
from .records import FAQManualMedia, ManualMaterial


class FAQManualMediaStore:
    """Links between FAQs and manually uploaded materials."""

    def __init__(self, db: Database, clock: Callable[[], float] = time.time) -> None:
        self.db = db
        self._clock = clock

    def create(self, media: FAQManualMedia) -> FAQManualMedia:
        """Insert a link, stamping its creation and update times."""
        now = int(self._clock())
        media.created_at = now
        media.updated_at = now
        return self.db.insert(media)

    def delete_by_faq_id(self, faq_id: int) -> int:
        """Delete all links of an FAQ; return the number removed."""
        return self.db.delete(FAQManualMedia, {"faq_id": faq_id})

    def list_by_faq_id(self, faq_id: int) -> list[FAQManualMedia]:
        """All links of an FAQ."""
        return self.db.select(FAQManualMedia, {"faq_id": faq_id})


class ManualMaterialStore:
    """Manually uploaded materials."""

    def __init__(self, db: Database, clock: Callable[[], float] = time.time) -> None:
        self.db = db
        self._clock = clock

    def create(self, material: ManualMaterial) -> ManualMaterial:
        """Insert a material, stamping its creation and update times."""
        now = int(self._clock())
        material.created_at = now
        material.updated_at = now
        return self.db.insert(material)

    def get_by_id(self, material_id: int) -> ManualMaterial:
        """Return the material with this id."""
        return self.db.first(ManualMaterial, {"id": material_id})

    def delete_by_id(self, material_id: int) -> int:
        """Delete a material; return the number of rows removed."""
        return self.db.delete(ManualMaterial, {"id": material_id})