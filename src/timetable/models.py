"""Pydantic models for timetable catalog and persistence data.

All data structures use Pydantic v2 for validation, serialization, and type safety.
Wire payloads use camelCase keys; Python attributes stay snake_case and either
spelling is accepted on input.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """Base for models exchanged with the backend REST API."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_wire(self) -> dict:
        """Dump with camelCase keys, ready for a JSON request body."""
        return self.model_dump(by_alias=True, mode="json")


class ClassRef(WireModel):
    """A class (grid row) from the /classes catalog."""

    id: str
    name: str
    section: str | None = None
    is_active: bool = True


class CatalogItem(WireModel):
    """A subject or an activity from the /subjects or /activities catalog."""

    id: str
    name: str


class ContentKind(str, Enum):
    SUBJECT = "subject"
    ACTIVITY = "activity"


class ContentRef(BaseModel):
    """Content assigned to a cell: Subject(id) or Activity(id).

    Resolved once when assigned. The composer only compares refs for
    equality; it never inspects what they mean.
    """

    model_config = ConfigDict(frozen=True)

    kind: ContentKind
    id: str

    @classmethod
    def subject(cls, content_id: str) -> "ContentRef":
        return cls(kind=ContentKind.SUBJECT, id=content_id)

    @classmethod
    def activity(cls, content_id: str) -> "ContentRef":
        return cls(kind=ContentKind.ACTIVITY, id=content_id)


class SpecialPeriod(WireModel):
    """A fixed, non-editable slot (break, lunch) applying to every day and class."""

    model_config = ConfigDict(frozen=True)

    time_slot: str
    label: str = Field(alias="name")
    style_hint: str = Field(default="", alias="bgColor")
    light_style_hint: str = Field(default="", alias="lightBgColor")


class AcademicYear(WireModel):
    id: str
    year: str
    is_active: bool = False


class Term(WireModel):
    id: str
    name: str


class PersistEntry(WireModel):
    """One physical cell with content, as sent to the save endpoint."""

    day: str
    time_slot: str
    subject_activity_id: str
    class_id: str
    section: str | None = None


class TimetablePayload(WireModel):
    """Body of POST /timetable/create and PUT /timetable/{id}."""

    name: str
    academic_year_id: str | None = None
    term_id: str | None = None
    special_periods: list[SpecialPeriod] = Field(default_factory=list)
    entries: list[PersistEntry] = Field(default_factory=list)


class SavedTimetable(WireModel):
    """A timetable as returned by GET /timetable/filter/{id}."""

    id: str
    name: str = ""
    academic_year_id: str | None = None
    term_id: str | None = None
    special_periods: list[SpecialPeriod] = Field(default_factory=list)
    entries: list[PersistEntry] = Field(default_factory=list)


class SaveResult(BaseModel):
    """Outcome of a save, interpreted only as success/failure for user feedback."""

    success: bool
    message: str = ""
    entry_count: int = 0
    timetable_id: str | None = None
