"""Shared test fixtures: HTTP client, in-memory fakes, PDF factory."""

import dataclasses
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from io import BytesIO
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import ASGITransport, AsyncClient
from pypdf import PdfWriter

from src.bp_common.container import ContainerKey
from src.bp_common.enums import DocumentStatus, PrintMode, RefundStatus
from src.bp_common.errors import (
    DuplicatePendingRefundError,
    InsufficientBalanceError,
    RefundNotFoundError,
    StorageError,
)
from src.bp_common.money import ZERO
from src.bp_document.domain.models import DocumentRecord, PendingContainerSummary
from src.bp_ledger.domain.models import LedgerAccount, Transaction
from src.bp_member.domain.models import MemberProfile
from src.bp_refund.domain.models import RefundRequest
from src.main import app

_T0 = datetime(2026, 1, 5, 9, 0, tzinfo=timezone.utc)


class _Clock:
    """Strictly increasing timestamps, one second apart."""

    def __init__(self) -> None:
        self._now = _T0

    def tick(self) -> datetime:
        self._now += timedelta(seconds=1)
        return self._now


# ---------------------------------------------------------------------------
# In-memory fakes conforming to the repository / collaborator protocols
# ---------------------------------------------------------------------------


class FakeLedgerRepository:
    def __init__(self) -> None:
        self.accounts: dict[str, LedgerAccount] = {}
        self.transactions: list[Transaction] = []
        self._clock = _Clock()

    async def get_account(self, db, owner_id):  # type: ignore[no-untyped-def]
        return self.accounts.get(owner_id)

    async def apply_credit(self, db, owner_id, amount, tx_type, description, reference_id):  # type: ignore[no-untyped-def]
        account = self.accounts.setdefault(owner_id, LedgerAccount(owner_id, ZERO, 0))
        account.balance += amount
        account.version += 1
        return account, self._append(owner_id, tx_type, amount, account.balance, description, reference_id)

    async def apply_debit(self, db, owner_id, amount, description, reference_id):  # type: ignore[no-untyped-def]
        account = self.accounts.get(owner_id)
        if account is None or account.balance < amount:
            raise InsufficientBalanceError(amount, account.balance if account else ZERO)
        account.balance -= amount
        account.version += 1
        return account, self._append(owner_id, "BILLING", -amount, account.balance, description, reference_id)

    async def list_transactions(self, db, owner_id, limit, oldest_first):  # type: ignore[no-untyped-def]
        txs = [t for t in self.transactions if t.owner_id == owner_id]
        txs.sort(key=lambda t: (t.created_at, t.id), reverse=not oldest_first)
        return txs if limit is None else txs[:limit]

    def _append(self, owner_id, tx_type, amount, balance_after, description, reference_id):  # type: ignore[no-untyped-def]
        tx = Transaction(
            id=len(self.transactions) + 1,
            owner_id=owner_id,
            tx_type=str(getattr(tx_type, "value", tx_type)),
            amount=amount,
            balance_after=balance_after,
            description=description,
            reference_id=reference_id,
            created_at=self._clock.tick(),
        )
        self.transactions.append(tx)
        return tx


class FakeDocumentRepository:
    def __init__(self) -> None:
        self.records: dict[int, DocumentRecord] = {}
        self.fail_insert: Exception | None = None
        self._clock = _Clock()

    async def insert(self, db, record):  # type: ignore[no-untyped-def]
        if self.fail_insert is not None:
            raise self.fail_insert
        saved = dataclasses.replace(
            record, id=len(self.records) + 1, submitted_at=self._clock.tick()
        )
        self.records[saved.id] = saved
        return saved

    async def get_by_id(self, db, document_id, for_update=False):  # type: ignore[no-untyped-def]
        return self.records.get(document_id)

    async def list_pending_for_container(self, db, container, print_mode=None):  # type: ignore[no-untyped-def]
        rows = [
            r for r in self.records.values()
            if r.status == DocumentStatus.PENDING
            and r.container == container
            and (print_mode is None or r.print_mode == PrintMode(print_mode).value)
        ]
        return sorted(rows, key=lambda r: (r.submitted_at, r.id))

    async def mark_processed(self, db, document_ids):  # type: ignore[no-untyped-def]
        changed = 0
        for doc_id in document_ids:
            record = self.records.get(doc_id)
            if record is not None and record.status == DocumentStatus.PENDING:
                record.status = DocumentStatus.PROCESSED.value
                changed += 1
        return changed

    async def delete(self, db, document_id):  # type: ignore[no-untyped-def]
        self.records.pop(document_id, None)

    async def list_by_owner(self, db, owner_id):  # type: ignore[no-untyped-def]
        rows = [r for r in self.records.values() if r.owner_id == owner_id]
        return sorted(rows, key=lambda r: (r.submitted_at, r.id), reverse=True)

    async def summarize_pending(self, db):  # type: ignore[no-untyped-def]
        groups: dict[tuple[ContainerKey, str], list[DocumentRecord]] = {}
        for r in self.records.values():
            if r.status == DocumentStatus.PENDING:
                groups.setdefault((r.container, r.print_mode), []).append(r)
        return [
            PendingContainerSummary(
                container=container,
                print_mode=mode,
                document_count=len(rows),
                total_copies=sum(r.copy_count for r in rows),
                total_cost=sum((r.total_cost for r in rows), ZERO),
                oldest_submitted_at=min(r.submitted_at for r in rows),
            )
            for (container, mode), rows in groups.items()
        ]


class FakeBlobStore:
    def __init__(self) -> None:
        self.blobs: dict[str, bytes] = {}
        self.deleted: list[str] = []
        self.fail_fetch: set[str] = set()
        self.fail_store = False
        self.fail_delete = False

    async def store(self, data, suggested_name, container_hint):  # type: ignore[no-untyped-def]
        if self.fail_store:
            raise StorageError("store refused")
        path = f"{container_hint}/{len(self.blobs) + len(self.deleted) + 1}-{suggested_name}"
        self.blobs[path] = data
        return path

    async def fetch(self, path):  # type: ignore[no-untyped-def]
        if path in self.fail_fetch or path not in self.blobs:
            raise StorageError(f"fetch {path}: not found")
        return self.blobs[path]

    async def delete(self, path):  # type: ignore[no-untyped-def]
        if self.fail_delete:
            raise StorageError(f"delete {path}: permission denied")
        self.blobs.pop(path, None)
        self.deleted.append(path)


class FakeRefundRepository:
    def __init__(self) -> None:
        self.requests: dict[int, RefundRequest] = {}
        self._clock = _Clock()

    async def insert(self, db, request):  # type: ignore[no-untyped-def]
        if await self.has_pending(db, request.owner_id):
            raise DuplicatePendingRefundError()
        saved = dataclasses.replace(
            request, id=len(self.requests) + 1, created_at=self._clock.tick()
        )
        self.requests[saved.id] = saved
        return saved

    async def get_by_id(self, db, request_id, for_update=False):  # type: ignore[no-untyped-def]
        return self.requests.get(request_id)

    async def has_pending(self, db, owner_id):  # type: ignore[no-untyped-def]
        return any(
            r.owner_id == owner_id and r.status == RefundStatus.PENDING
            for r in self.requests.values()
        )

    async def update_status(self, db, request_id, status, payout_reference, admin_note, processed_at):  # type: ignore[no-untyped-def]
        current = self.requests.get(request_id)
        if current is None:
            raise RefundNotFoundError(request_id)
        updated = dataclasses.replace(
            current,
            status=status,
            payout_reference=payout_reference or current.payout_reference,
            admin_note=admin_note or current.admin_note,
            processed_at=processed_at,
        )
        self.requests[request_id] = updated
        return updated

    async def list_pending(self, db):  # type: ignore[no-untyped-def]
        rows = [r for r in self.requests.values() if r.status == RefundStatus.PENDING]
        return sorted(rows, key=lambda r: (r.created_at, r.id))

    async def list_by_owner(self, db, owner_id):  # type: ignore[no-untyped-def]
        rows = [r for r in self.requests.values() if r.owner_id == owner_id]
        return sorted(rows, key=lambda r: (r.created_at, r.id), reverse=True)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
async def client() -> AsyncClient:
    """Async HTTP client for testing FastAPI endpoints."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def db() -> MagicMock:
    """Stand-in AsyncSession: only commit / rollback are awaited by services."""
    session = MagicMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    return session


@pytest.fixture
def ledger_repo() -> FakeLedgerRepository:
    return FakeLedgerRepository()


@pytest.fixture
def document_repo() -> FakeDocumentRepository:
    return FakeDocumentRepository()


@pytest.fixture
def blob_store() -> FakeBlobStore:
    return FakeBlobStore()


@pytest.fixture
def refund_repo() -> FakeRefundRepository:
    return FakeRefundRepository()


@pytest.fixture
def container() -> ContainerKey:
    return ContainerKey("2025-26", "Computer Science", "A", "Semester 3", "B1")


@pytest.fixture
def member(container: ContainerKey) -> MemberProfile:
    return MemberProfile(
        id="stu-17",
        display_name="Asha Rao",
        roll_number="CS-017",
        period=container.period,
        group=container.group,
        subgroup=container.subgroup,
        term=container.term,
        cohort=container.cohort,
    )


@pytest.fixture
def make_pdf() -> Callable[..., bytes]:
    """make_pdf(pages=1, width=612, height=792) -> bytes of a blank-page PDF."""

    def _make(pages: int = 1, width: float = 612, height: float = 792) -> bytes:
        writer = PdfWriter()
        for _ in range(pages):
            writer.add_blank_page(width=width, height=height)
        buf = BytesIO()
        writer.write(buf)
        return buf.getvalue()

    return _make


@pytest.fixture
def make_record(container: ContainerKey) -> Callable[..., DocumentRecord]:
    def _make(
        owner_id: str = "stu-17",
        storage_path: str = "blob.pdf",
        print_mode: PrintMode = PrintMode.SIMPLEX,
        copy_count: int = 1,
        page_count: int = 1,
        total_cost: Decimal = Decimal("2.00"),
        filename: str = "notes.pdf",
    ) -> DocumentRecord:
        return DocumentRecord(
            id=0,
            owner_id=owner_id,
            original_filename=filename,
            storage_path=storage_path,
            container=container,
            byte_size=100,
            status=DocumentStatus.PENDING.value,
            print_mode=PrintMode(print_mode).value,
            copy_count=copy_count,
            page_count=page_count,
            billed_page_count=page_count,
            total_cost=total_cost,
        )

    return _make
