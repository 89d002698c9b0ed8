"""
Deduplication Data Model
========================

Plain data types exchanged with the deduplication engine:

- FileRecord: a decrypted vault file as handed over by the file store
- DuplicateGroup: two or more files the engine considers redundant
- DuplicateAnalysis: the full report for one batch of files
- RetentionDecision: which member of a group to keep and which to delete

Records are validated eagerly at the boundary. Loosely shaped input (as
produced by the vault front end) goes through `FileRecord.from_dict`, which
raises `MalformedRecordError` instead of letting half-filled records into a
run.
"""

import base64
import binascii
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple

from vaultdedup.core.dedup.errors import MalformedRecordError


class FileType(str, Enum):
    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"
    DOCUMENT = "document"
    OTHER = "other"


class DuplicateCategory(str, Enum):
    """Kind of redundancy a group represents."""
    EXACT = "exact"
    SIMILAR = "similar"
    NAME = "name"

    @property
    def display_name(self) -> str:
        return _CATEGORY_DISPLAY_NAMES[self]

    @property
    def reclaimable(self) -> bool:
        """Whether deleting members of this category frees space safely."""
        return self in (DuplicateCategory.EXACT, DuplicateCategory.SIMILAR)


_CATEGORY_DISPLAY_NAMES = {
    DuplicateCategory.EXACT: "Exact",
    DuplicateCategory.SIMILAR: "PerceptualSimilar",
    DuplicateCategory.NAME: "NameSimilar",
}


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _parse_datetime(value: Any, record_id: Any, field_name: str) -> datetime:
    if isinstance(value, datetime):
        return _as_utc(value)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            return datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, OSError, ValueError) as e:
            raise MalformedRecordError(
                f"Record {record_id!r}: invalid timestamp for '{field_name}': {e}",
                record_id=record_id, field_name=field_name
            )
    if isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            return _as_utc(datetime.fromisoformat(text))
        except ValueError:
            raise MalformedRecordError(
                f"Record {record_id!r}: '{field_name}' is not an ISO-8601 date: {value!r}",
                record_id=record_id, field_name=field_name
            )
    raise MalformedRecordError(
        f"Record {record_id!r}: '{field_name}' must be a date, got {type(value).__name__}",
        record_id=record_id, field_name=field_name
    )


def _parse_content(value: Any, record_id: Any) -> bytes:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    if isinstance(value, str):
        text = value
        # data:image/png;base64,....
        if text.startswith("data:") and "," in text:
            text = text.split(",", 1)[1]
        try:
            return base64.b64decode(text, validate=True)
        except (binascii.Error, ValueError) as e:
            raise MalformedRecordError(
                f"Record {record_id!r}: 'content' is not valid base64: {e}",
                record_id=record_id, field_name="content"
            )
    raise MalformedRecordError(
        f"Record {record_id!r}: 'content' must be bytes, got {type(value).__name__}",
        record_id=record_id, field_name="content"
    )


# Accepted spellings for each field in loosely shaped input
_FIELD_ALIASES = {
    "id": ("id",),
    "name": ("name",),
    "type": ("type",),
    "size_bytes": ("size_bytes", "sizeBytes", "size"),
    "content": ("content", "data"),
    "date_added": ("date_added", "dateAdded"),
    "date_modified": ("date_modified", "dateModified"),
}


def _lookup(data: Mapping[str, Any], field_name: str, record_id: Any) -> Any:
    for key in _FIELD_ALIASES[field_name]:
        if key in data and data[key] is not None:
            return data[key]
    raise MalformedRecordError(
        f"Record {record_id!r} is missing required field '{field_name}'",
        record_id=record_id, field_name=field_name
    )


@dataclass(frozen=True)
class FileRecord:
    """
    A single decrypted vault file.

    The engine only reads records; it never changes or stores them. Content
    must be the plaintext bytes (for images, an encoded raster such as PNG or
    JPEG). Hashing still-encrypted bytes would make identical files look
    different whenever they were encrypted with different nonces.
    """
    id: str
    name: str
    type: FileType
    size_bytes: int
    content: bytes = field(repr=False)
    date_added: datetime
    date_modified: datetime

    def __post_init__(self):
        record_id = self.id
        if not isinstance(record_id, str) or not record_id:
            raise MalformedRecordError(
                f"Record id must be a non-empty string, got {record_id!r}",
                record_id=record_id, field_name="id"
            )
        if not isinstance(self.name, str):
            raise MalformedRecordError(
                f"Record {record_id!r}: 'name' must be a string",
                record_id=record_id, field_name="name"
            )

        try:
            file_type = FileType(self.type)
        except ValueError:
            raise MalformedRecordError(
                f"Record {record_id!r}: unknown file type {self.type!r}",
                record_id=record_id, field_name="type"
            )
        object.__setattr__(self, "type", file_type)

        size = self.size_bytes
        if isinstance(size, bool) or not isinstance(size, int) or size < 0:
            raise MalformedRecordError(
                f"Record {record_id!r}: 'size_bytes' must be a non-negative integer, got {size!r}",
                record_id=record_id, field_name="size_bytes"
            )

        if not isinstance(self.content, bytes):
            raise MalformedRecordError(
                f"Record {record_id!r}: 'content' must be bytes, got {type(self.content).__name__}",
                record_id=record_id, field_name="content"
            )

        for name in ("date_added", "date_modified"):
            value = getattr(self, name)
            if not isinstance(value, datetime):
                raise MalformedRecordError(
                    f"Record {record_id!r}: '{name}' must be a datetime",
                    record_id=record_id, field_name=name
                )
            object.__setattr__(self, name, _as_utc(value))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FileRecord":
        """
        Build a validated record from a loosely shaped mapping.

        Accepts snake_case or camelCase keys, 'size' for the byte size,
        content as bytes, a base64 string or a data URL, and dates as
        datetimes, ISO-8601 strings or epoch seconds.
        """
        if not isinstance(data, Mapping):
            raise MalformedRecordError(
                f"File record must be a mapping, got {type(data).__name__}"
            )

        record_id = data.get("id")
        if isinstance(record_id, int) and not isinstance(record_id, bool):
            record_id = str(record_id)
        _lookup(data, "id", record_id)

        size = _lookup(data, "size_bytes", record_id)
        if isinstance(size, float) and size.is_integer():
            size = int(size)

        return cls(
            id=record_id,
            name=_lookup(data, "name", record_id),
            type=_lookup(data, "type", record_id),
            size_bytes=size,
            content=_parse_content(_lookup(data, "content", record_id), record_id),
            date_added=_parse_datetime(_lookup(data, "date_added", record_id), record_id, "date_added"),
            date_modified=_parse_datetime(_lookup(data, "date_modified", record_id), record_id, "date_modified"),
        )

    @property
    def is_image(self) -> bool:
        return self.type is FileType.IMAGE


@dataclass(frozen=True)
class DuplicateGroup:
    """
    A set of two or more files considered redundant.

    `members` holds FileRecord ids in input order. For exact groups the first
    member is the one assumed kept when estimating savings; which file is
    actually kept is decided later by a retention strategy.

    `similarity_score` is 1.0 for exact groups. For greedy similar and name
    groups it is the similarity between the first member and the second.
    Connected similar groups report the lowest similarity between the first
    member and any other member; members joined through a chain can score
    at or below the grouping threshold, so the score is not a pairwise
    guarantee.
    """
    id: str
    category: DuplicateCategory
    members: Tuple[str, ...]
    similarity_score: float
    total_size_bytes: int
    potential_savings_bytes: int

    def __post_init__(self):
        object.__setattr__(self, "category", DuplicateCategory(self.category))
        object.__setattr__(self, "members", tuple(self.members))

        if len(self.members) < 2:
            raise ValueError(f"Group {self.id} needs at least 2 members, got {len(self.members)}")
        if len(set(self.members)) != len(self.members):
            raise ValueError(f"Group {self.id} lists a member more than once")
        if not 0.0 <= self.similarity_score <= 1.0:
            raise ValueError(f"Group {self.id} similarity {self.similarity_score} outside [0, 1]")
        if self.category is DuplicateCategory.EXACT and self.similarity_score != 1.0:
            raise ValueError(f"Exact group {self.id} must have similarity 1.0")
        if self.potential_savings_bytes < 0:
            raise ValueError(f"Group {self.id} has negative savings")
        if self.category is DuplicateCategory.NAME and self.potential_savings_bytes != 0:
            raise ValueError(f"Name group {self.id} cannot report savings")

    @property
    def duplicate_count(self) -> int:
        """Number of members beyond the one that would be kept."""
        return len(self.members) - 1


@dataclass(frozen=True)
class DuplicateAnalysis:
    """Report over one batch of files. Recomputed on demand, never stored."""
    total_duplicate_files: int
    groups: Tuple[DuplicateGroup, ...]
    potential_savings_bytes: int
    generated_at: datetime
    skipped_file_ids: Tuple[str, ...] = ()

    def _by_category(self, category: DuplicateCategory) -> Tuple[DuplicateGroup, ...]:
        return tuple(g for g in self.groups if g.category is category)

    @property
    def exact_groups(self) -> Tuple[DuplicateGroup, ...]:
        return self._by_category(DuplicateCategory.EXACT)

    @property
    def similar_groups(self) -> Tuple[DuplicateGroup, ...]:
        return self._by_category(DuplicateCategory.SIMILAR)

    @property
    def name_groups(self) -> Tuple[DuplicateGroup, ...]:
        return self._by_category(DuplicateCategory.NAME)

    def group(self, group_id: str) -> Optional[DuplicateGroup]:
        for candidate in self.groups:
            if candidate.id == group_id:
                return candidate
        return None


@dataclass(frozen=True)
class RetentionDecision:
    """Outcome of applying a keep strategy to one group."""
    group_id: str
    keep_file_id: Optional[str]
    delete_file_ids: Tuple[str, ...]
    strategy: str
    reason: str = ""

    @property
    def is_actionable(self) -> bool:
        return bool(self.delete_file_ids)


def index_records(files) -> Dict[str, FileRecord]:
    """
    Map record ids to records, preserving input order.

    Raises MalformedRecordError on duplicate ids.
    """
    index: Dict[str, FileRecord] = {}
    for record in files:
        if record.id in index:
            raise MalformedRecordError(
                f"Duplicate record id {record.id!r} in batch",
                record_id=record.id, field_name="id"
            )
        index[record.id] = record
    return index
