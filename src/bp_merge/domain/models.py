"""Merge domain models — results and per-document failure descriptors."""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class FailureDescriptor:
    """Enough detail for an operator to retrieve and print a failed item by hand."""

    document_id: int
    owner_id: str
    filename: str
    storage_path: str
    print_mode: str
    copy_count: int
    reason: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "document_id": self.document_id,
            "owner_id": self.owner_id,
            "filename": self.filename,
            "storage_path": self.storage_path,
            "print_mode": self.print_mode,
            "copy_count": self.copy_count,
            "reason": self.reason,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "FailureDescriptor":
        return cls(
            document_id=int(raw["document_id"]),
            owner_id=str(raw["owner_id"]),
            filename=str(raw["filename"]),
            storage_path=str(raw["storage_path"]),
            print_mode=str(raw["print_mode"]),
            copy_count=int(raw.get("copy_count", 1)),
            reason=str(raw["reason"]),
        )


@dataclass(frozen=True)
class FetchOutcome:
    """Result of one blob fetch: exactly one of data / error is set."""

    data: bytes | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class MergeResult:
    artifact: bytes
    success_count: int
    total_count: int
    failures: list[FailureDescriptor] = field(default_factory=list)
    attempted_ids: list[int] = field(default_factory=list)

    @property
    def failure_count(self) -> int:
        return len(self.failures)
