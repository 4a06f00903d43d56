"""Pydantic models for observation records."""

from datetime import datetime
from typing import Any, Iterator, List, Optional
from uuid import UUID, uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    field_serializer,
    field_validator,
    model_validator,
)

from birdcount.utils.time import ensure_utc, format_timestamp, utcnow


class ObservationRecord(BaseModel):
    """One logged sighting: species, time interval and signed count.

    Records nest: a child record is a correction or detail of its parent and
    carries the parent's id in ``parent_id``. Child counts may be negative to
    reduce the parent's effective total.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "id": "9b2f3c1e-6f1a-4f3e-9d57-1c2b3a4d5e6f",
                "parentId": None,
                "taxonId": "amecro",
                "begin": "2024-05-01T12:00:00.000000Z",
                "end": "2024-05-01T12:00:00.000000Z",
                "count": 2,
                "children": [],
            }
        },
    )

    id: UUID = Field(default_factory=uuid4, description="Record identifier")
    parent_id: Optional[UUID] = Field(
        None, alias="parentId", description="Owning record for child records"
    )
    taxon_id: str = Field(..., alias="taxonId", description="Species code")
    begin: datetime = Field(..., description="Start of the observation")
    end: datetime = Field(..., description="End of the observation")
    count: int = Field(1, description="Signed number of individuals")
    children: List["ObservationRecord"] = Field(
        default_factory=list, description="Nested child records"
    )

    @model_validator(mode="before")
    @classmethod
    def default_interval(cls, data: Any) -> Any:
        """Fill ``begin`` with now and ``end`` with ``begin`` when absent."""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if data.get("begin") is None:
            data["begin"] = utcnow()
        if data.get("end") is None:
            data["end"] = data["begin"]
        return data

    @field_validator("begin", "end")
    @classmethod
    def normalize_timezone(cls, v: datetime) -> datetime:
        """Store every timestamp as aware UTC."""
        return ensure_utc(v)

    @model_validator(mode="after")
    def validate_hierarchy(self) -> "ObservationRecord":
        """Check the interval and link children back to this record."""
        if self.end < self.begin:
            raise ValueError(
                f"Observation end {self.end.isoformat()} is before begin "
                f"{self.begin.isoformat()}"
            )
        for child in self.children:
            child.parent_id = self.id
        return self

    @field_serializer("begin", "end")
    def serialize_timestamp(self, value: datetime) -> str:
        return format_timestamp(value)

    @classmethod
    def child_of(
        cls,
        parent: "ObservationRecord",
        taxon_id: str,
        begin: Optional[datetime] = None,
        end: Optional[datetime] = None,
        count: int = 1,
    ) -> "ObservationRecord":
        """Create a record and attach it under ``parent``.

        Args:
            parent: Record that will own the new child
            taxon_id: Species code of the child
            begin: Start time (default now)
            end: End time (default ``begin``)
            count: Signed count

        Returns:
            The attached child record
        """
        child = cls(taxon_id=taxon_id, begin=begin, end=end, count=count)
        return parent.add_child(child)

    def add_child(self, child: "ObservationRecord") -> "ObservationRecord":
        """Append ``child`` and point its ``parent_id`` at this record."""
        child.parent_id = self.id
        self.children.append(child)
        return child

    def iter_tree(self) -> Iterator["ObservationRecord"]:
        """Yield this record and all descendants, depth-first."""
        yield self
        for child in self.children:
            yield from child.iter_tree()

    def total_count(self) -> int:
        """Signed count of this record plus all descendants."""
        return self.count + sum(child.total_count() for child in self.children)

    def to_dict(self) -> dict:
        """JSON-ready dictionary with camelCase keys and text timestamps."""
        return self.model_dump(mode="json", by_alias=True)


class RecentEntry(BaseModel):
    """Most-recently-touched species hint kept by the observation log."""

    taxon_id: str = Field(..., description="Species code")
    last_updated: datetime = Field(..., description="Last mutation for the species")


_RECORD_LIST = TypeAdapter(List[ObservationRecord])


def encode_records(records: List[ObservationRecord]) -> str:
    """Serialize top-level records (with nested children) to JSON text."""
    return _RECORD_LIST.dump_json(records, by_alias=True).decode("utf-8")


def decode_records(text: str) -> List[ObservationRecord]:
    """Parse JSON text produced by :func:`encode_records`.

    Raises:
        pydantic.ValidationError: If the text is not a valid record list
    """
    return _RECORD_LIST.validate_json(text)
