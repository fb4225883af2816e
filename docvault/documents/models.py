import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

ALLOWED_MIME_TYPES: frozenset[str] = frozenset(
    {
        "text/plain",
        "application/pdf",
        "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    }
)


class ProcessingStatus(str, Enum):
    """Lifecycle of a document's processing record.

    PENDING -> PROCESSING -> COMPLETED | FAILED. The last two are terminal.
    """

    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"

    @property
    def is_terminal(self) -> bool:
        return self in (ProcessingStatus.COMPLETED, ProcessingStatus.FAILED)


class SortField(str, Enum):
    UPLOADED_AT = "uploadedAt"
    ORIGINAL_NAME = "originalName"
    SIZE = "size"


class SortOrder(str, Enum):
    ASC = "ASC"
    DESC = "DESC"


@dataclass(frozen=True)
class Document:
    """Immutable upload metadata (row of the documents table)."""

    id: str
    filename: str
    original_name: str
    mime_type: str
    size: int
    storage_key: str
    uploaded_at: datetime


@dataclass
class ProcessingRecord:
    """Row of the processing_records table, one per document."""

    document_id: str
    status: ProcessingStatus
    summary: str | None = None
    markdown: str | None = None
    processed_at: datetime | None = None
    error_message: str | None = None
    started_at: datetime | None = None


@dataclass(frozen=True)
class DocumentListItem:
    """Lightweight listing row: document metadata plus current status."""

    id: str
    filename: str
    original_name: str
    mime_type: str
    size: int
    uploaded_at: datetime
    processing_status: ProcessingStatus


@dataclass(frozen=True)
class DownloadResult:
    data: bytes
    original_name: str
    mime_type: str


class ListQuery(BaseModel):
    """Validated listing parameters."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1, le=100)
    sort_by: SortField = Field(default=SortField.UPLOADED_AT, alias="sortBy")
    order: SortOrder = SortOrder.DESC

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass(frozen=True)
class PageMeta:
    page: int
    limit: int
    total: int
    total_pages: int
    has_next_page: bool
    has_previous_page: bool

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "PageMeta":
        total_pages = math.ceil(total / limit)
        return cls(
            page=page,
            limit=limit,
            total=total,
            total_pages=total_pages,
            has_next_page=page < total_pages,
            has_previous_page=page > 1,
        )


T = TypeVar("T")


@dataclass(frozen=True)
class Page(Generic[T]):
    meta: PageMeta
    data: list[T] = field(default_factory=list)
