"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Member/Profile
  2xxx: Ledger
  3xxx: Document/Ingestion
  4xxx: Merge
  5xxx: Refund
  9xxx: System
"""

from decimal import Decimal
from typing import Any


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)

    @property
    def data(self) -> Any:
        """Structured payload rendered alongside the message, if any."""
        return None


# --- 1xxx: Member/Profile ---

class MemberNotFoundError(AppError):
    def __init__(self, member_id: str) -> None:
        super().__init__(1001, f"Member not found: {member_id}", 404)


class IncompleteProfileError(AppError):
    def __init__(self, missing: list[str]) -> None:
        super().__init__(
            1002,
            "Profile setup incomplete, missing: " + ", ".join(missing),
            422,
        )


class OperatorRequiredError(AppError):
    def __init__(self) -> None:
        super().__init__(1003, "Operator credentials required", 403)


# --- 2xxx: Ledger ---

class InsufficientBalanceError(AppError):
    def __init__(self, required: Decimal, available: Decimal) -> None:
        super().__init__(
            2001,
            f"Insufficient balance: required {required}, available {available}",
            422,
        )


class InvalidAmountError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(2002, f"Invalid amount: {detail}", 422)


# --- 3xxx: Document/Ingestion ---

class EmptyFileError(AppError):
    def __init__(self) -> None:
        super().__init__(3001, "Uploaded file is empty", 422)


class UnsupportedContentTypeError(AppError):
    def __init__(self, content_type: str | None, expected: str) -> None:
        super().__init__(
            3002, f"Unsupported content type {content_type!r}, expected {expected}", 415
        )


class FileTooLargeError(AppError):
    def __init__(self, size: int, limit: int) -> None:
        super().__init__(3003, f"File size {size} bytes exceeds limit of {limit} bytes", 413)


class MissingExtensionError(AppError):
    def __init__(self, filename: str | None) -> None:
        super().__init__(3004, f"Filename has no recognizable extension: {filename!r}", 422)


class CorruptDocumentError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(3005, f"Corrupt or unreadable document: {detail}", 422)


class InvalidCopyCountError(AppError):
    def __init__(self, copy_count: int, limit: int) -> None:
        super().__init__(3006, f"Copy count must be between 1 and {limit}, got {copy_count}", 422)


class DocumentNotFoundError(AppError):
    def __init__(self, document_id: int) -> None:
        super().__init__(3007, f"Document not found: {document_id}", 404)


class NotOwnerError(AppError):
    def __init__(self, document_id: int) -> None:
        super().__init__(3008, f"Document {document_id} belongs to another member", 403)


class DocumentNotPendingError(AppError):
    def __init__(self, document_id: int, status: str) -> None:
        super().__init__(
            3009, f"Document {document_id} in status {status} can no longer be deleted", 422
        )


# --- 4xxx: Merge ---

class NothingToMergeError(AppError):
    def __init__(self, cache_key: str) -> None:
        super().__init__(4001, f"No pending documents for container: {cache_key}", 404)


class AllDocumentsFailedError(AppError):
    def __init__(self, cache_key: str, failures: list[Any]) -> None:
        self.failures = failures
        super().__init__(
            4002,
            f"All {len(failures)} documents failed to merge for container: {cache_key}",
            422,
        )

    @property
    def data(self) -> Any:
        return {"failures": [f.to_dict() for f in self.failures]}


class MergedArtifactNotFoundError(AppError):
    def __init__(self, cache_key: str) -> None:
        super().__init__(4003, f"No merged artifact cached for container: {cache_key}", 404)


# --- 5xxx: Refund ---

class DuplicatePendingRefundError(AppError):
    def __init__(self) -> None:
        super().__init__(5001, "A refund request is already pending for this member", 409)


class NetPayoutNonPositiveError(AppError):
    def __init__(self, net_payout: Decimal) -> None:
        super().__init__(5002, f"Net payout after fees must be positive, got {net_payout}", 422)


class RefundNotFoundError(AppError):
    def __init__(self, request_id: int) -> None:
        super().__init__(5003, f"Refund request not found: {request_id}", 404)


# --- 9xxx: System ---

class StorageError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(9001, f"Storage failure: {detail}", 502)


class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)


class InvalidStateTransitionError(AppError):
    def __init__(self, entity: str, current: str, target: str) -> None:
        super().__init__(9003, f"{entity} cannot move from {current} to {target}", 409)
