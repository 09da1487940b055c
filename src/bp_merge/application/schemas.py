"""Pydantic schemas for bp_merge API."""

from decimal import Decimal

from pydantic import BaseModel, Field

from src.bp_common.container import ContainerKey
from src.bp_common.datetime_utils import to_iso
from src.bp_common.enums import PrintMode
from src.bp_common.money import money_to_display
from src.bp_document.domain.models import PendingContainerSummary
from src.bp_merge.domain.models import FailureDescriptor, MergeResult

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class ContainerSelector(BaseModel):
    """Identifies a container; blank components map to the "Unknown ..." sentinels."""

    period: str | None = Field(None, max_length=64)
    group: str | None = Field(None, max_length=64)
    subgroup: str | None = Field(None, max_length=64)
    term: str | None = Field(None, max_length=64)
    cohort: str | None = Field(None, max_length=64)
    print_mode: PrintMode | None = None

    def to_key(self) -> ContainerKey:
        return ContainerKey.normalized(
            self.period, self.group, self.subgroup, self.term, self.cohort
        )


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class ContainerOut(BaseModel):
    period: str
    group: str
    subgroup: str
    term: str
    cohort: str

    @classmethod
    def from_key(cls, key: ContainerKey) -> "ContainerOut":
        return cls(
            period=key.period, group=key.group, subgroup=key.subgroup,
            term=key.term, cohort=key.cohort,
        )


class FailureItem(BaseModel):
    document_id: int
    owner_id: str
    filename: str
    storage_path: str
    print_mode: str
    copy_count: int
    reason: str

    @classmethod
    def from_domain(cls, f: FailureDescriptor) -> "FailureItem":
        return cls(**f.to_dict())


class MergeSummaryResponse(BaseModel):
    cache_key: str
    success_count: int
    total_count: int
    failure_count: int
    artifact_bytes: int
    failures: list[FailureItem]

    @classmethod
    def from_result(cls, cache_key: str, result: MergeResult) -> "MergeSummaryResponse":
        return cls(
            cache_key=cache_key,
            success_count=result.success_count,
            total_count=result.total_count,
            failure_count=result.failure_count,
            artifact_bytes=len(result.artifact),
            failures=[FailureItem.from_domain(f) for f in result.failures],
        )


class FailureListResponse(BaseModel):
    cache_key: str
    failures: list[FailureItem]


class MarkProcessedResponse(BaseModel):
    cache_key: str
    attempted: int
    marked: int


class ClearCacheResponse(BaseModel):
    cache_key: str
    cleared: bool


class PendingContainerItem(BaseModel):
    container: ContainerOut
    print_mode: str
    document_count: int
    total_copies: int
    total_cost: Decimal
    total_cost_display: str
    oldest_submitted_at: str

    @classmethod
    def from_domain(cls, s: PendingContainerSummary) -> "PendingContainerItem":
        return cls(
            container=ContainerOut.from_key(s.container),
            print_mode=s.print_mode,
            document_count=s.document_count,
            total_copies=s.total_copies,
            total_cost=s.total_cost,
            total_cost_display=money_to_display(s.total_cost),
            oldest_submitted_at=to_iso(s.oldest_submitted_at),
        )


class PendingContainersResponse(BaseModel):
    items: list[PendingContainerItem]
