"""Catalog lookups - classes, subjects and activities fetched once per session."""

from collections.abc import Iterable

from src.timetable.errors import UnknownContentError
from src.timetable.models import CatalogItem, ClassRef, ContentKind, ContentRef


class Catalog:
    """Read-only lookup tables for the current session.

    Display names are resolved here for rendering only; the merge logic
    compares ContentRefs, never names.
    """

    def __init__(
        self,
        classes: Iterable[ClassRef] = (),
        subjects: Iterable[CatalogItem] = (),
        activities: Iterable[CatalogItem] = (),
    ) -> None:
        self.classes: list[ClassRef] = list(classes)
        self.subjects: dict[str, CatalogItem] = {s.id: s for s in subjects}
        self.activities: dict[str, CatalogItem] = {a.id: a for a in activities}
        self._classes_by_id = {c.id: c for c in self.classes}

    def resolve(self, content_id: str) -> ContentRef:
        """Resolve a raw id to Subject(id) or Activity(id), subjects first.

        Raises:
            UnknownContentError: If the id is in neither catalog.
        """
        if content_id in self.subjects:
            return ContentRef.subject(content_id)
        if content_id in self.activities:
            return ContentRef.activity(content_id)
        raise UnknownContentError(f"Unknown subject or activity id {content_id!r}")

    def display_name(self, ref: ContentRef) -> str:
        table = self.subjects if ref.kind is ContentKind.SUBJECT else self.activities
        item = table.get(ref.id)
        return item.name if item else ref.id

    def class_by_id(self, class_id: str) -> ClassRef | None:
        return self._classes_by_id.get(class_id)

    def sections(self) -> list[str]:
        """Distinct sections in catalog order."""
        seen: list[str] = []
        for c in self.classes:
            if c.section and c.section not in seen:
                seen.append(c.section)
        return seen

    def classes_in_section(self, section: str) -> list[ClassRef]:
        return [c for c in self.classes if c.section == section]
