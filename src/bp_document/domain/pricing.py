"""Pricing table — (print mode, page count, copies) -> billed pages and cost.

Pure functions, Decimal only. Rounding (HALF_UP, 2 places) is applied once,
to the final total.
"""

from dataclasses import dataclass
from decimal import Decimal

from config.settings import settings
from src.bp_common.enums import PrintMode
from src.bp_common.money import quantize_money


@dataclass(frozen=True)
class PriceTable:
    simplex: Decimal
    duplex: Decimal
    color: Decimal

    @classmethod
    def from_settings(cls) -> "PriceTable":
        return cls(
            simplex=settings.PRICE_SIMPLEX,
            duplex=settings.PRICE_DUPLEX,
            color=settings.PRICE_COLOR,
        )

    def unit_price(self, print_mode: PrintMode) -> Decimal:
        mode = PrintMode(print_mode)
        if mode is PrintMode.SIMPLEX:
            return self.simplex
        if mode is PrintMode.DUPLEX:
            return self.duplex
        return self.color


@dataclass(frozen=True)
class PriceQuote:
    billed_pages: int
    unit_price: Decimal
    total_cost: Decimal


def billed_pages(page_count: int, print_mode: PrintMode) -> int:
    """DUPLEX rounds up to an even page count (one trailing blank page); others bill as-is."""
    if PrintMode(print_mode) is PrintMode.DUPLEX and page_count % 2 == 1:
        return page_count + 1
    return page_count


def cost(
    page_count: int,
    copy_count: int,
    print_mode: PrintMode,
    table: PriceTable | None = None,
) -> PriceQuote:
    """Quote a document.

    7 pages, DUPLEX @1.00, 2 copies -> billed 8, total 16.00.
    page_count <= 0 is the caller's responsibility.
    """
    prices = table or PriceTable.from_settings()
    pages = billed_pages(page_count, print_mode)
    unit = prices.unit_price(print_mode)
    total = quantize_money(unit * pages * copy_count)
    return PriceQuote(billed_pages=pages, unit_price=unit, total_cost=total)
