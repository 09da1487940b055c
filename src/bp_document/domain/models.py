"""Document domain models — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from src.bp_common.container import ContainerKey
from src.bp_common.enums import DocumentStatus
from src.bp_common.errors import InvalidStateTransitionError

# PENDING is the only state with outgoing edges.
_ALLOWED_TRANSITIONS: dict[DocumentStatus, frozenset[DocumentStatus]] = {
    DocumentStatus.PENDING: frozenset({DocumentStatus.PROCESSED, DocumentStatus.DELETED}),
    DocumentStatus.PROCESSED: frozenset(),
    DocumentStatus.DELETED: frozenset(),
}


def transition_document(current: str, target: DocumentStatus) -> DocumentStatus:
    """Return target if current -> target is legal, else raise InvalidStateTransitionError."""
    cur = DocumentStatus(current)
    tgt = DocumentStatus(target)
    if tgt not in _ALLOWED_TRANSITIONS[cur]:
        raise InvalidStateTransitionError("Document", cur.value, tgt.value)
    return tgt


@dataclass(frozen=True)
class UploadedFile:
    """An incoming file as received from the member-facing layer."""

    filename: str | None
    content_type: str | None
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def extension(self) -> str | None:
        """Lower-cased extension without the dot, or None if there is none."""
        if not self.filename:
            return None
        stem, dot, ext = self.filename.rpartition(".")
        if not dot or not stem or not ext.strip():
            return None
        return ext.lower()


@dataclass
class DocumentRecord:
    id: int                          # BIGSERIAL; 0 until persisted
    owner_id: str
    original_filename: str
    storage_path: str
    container: ContainerKey
    byte_size: int
    status: str                      # DocumentStatus value
    print_mode: str                  # PrintMode value
    copy_count: int
    page_count: int                  # real pages in the uploaded file
    billed_page_count: int           # >= page_count (duplex padding)
    total_cost: Decimal              # billed_page_count * copy_count * unit price
    submitted_at: datetime | None = None

    @property
    def is_pending(self) -> bool:
        return self.status == DocumentStatus.PENDING


@dataclass(frozen=True)
class PendingContainerSummary:
    """Aggregate of PENDING documents for one (container, print mode) pair."""

    container: ContainerKey
    print_mode: str
    document_count: int
    total_copies: int
    total_cost: Decimal
    oldest_submitted_at: datetime | None = None
