"""Pydantic schemas for bp_document API."""

from decimal import Decimal

from pydantic import BaseModel

from src.bp_common.datetime_utils import to_iso
from src.bp_common.money import money_to_display
from src.bp_document.domain.models import DocumentRecord


class ContainerOut(BaseModel):
    period: str
    group: str
    subgroup: str
    term: str
    cohort: str


class DocumentResponse(BaseModel):
    id: int
    owner_id: str
    original_filename: str
    container: ContainerOut
    byte_size: int
    status: str
    print_mode: str
    copy_count: int
    page_count: int
    billed_page_count: int
    total_cost: Decimal
    total_cost_display: str
    submitted_at: str  # ISO8601 string

    @classmethod
    def from_domain(cls, record: DocumentRecord) -> "DocumentResponse":
        c = record.container
        return cls(
            id=record.id,
            owner_id=record.owner_id,
            original_filename=record.original_filename,
            container=ContainerOut(
                period=c.period, group=c.group, subgroup=c.subgroup, term=c.term, cohort=c.cohort
            ),
            byte_size=record.byte_size,
            status=record.status,
            print_mode=record.print_mode,
            copy_count=record.copy_count,
            page_count=record.page_count,
            billed_page_count=record.billed_page_count,
            total_cost=record.total_cost,
            total_cost_display=money_to_display(record.total_cost),
            submitted_at=to_iso(record.submitted_at),
        )


class DocumentListResponse(BaseModel):
    items: list[DocumentResponse]


class SubmitDocumentResponse(BaseModel):
    document: DocumentResponse
    transaction_id: int
    charged: Decimal
    balance: Decimal
    balance_display: str


class DeleteDocumentResponse(BaseModel):
    document_id: int
    refunded: Decimal
    refunded_display: str
