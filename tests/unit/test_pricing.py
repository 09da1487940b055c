from decimal import Decimal

import pytest

from src.bp_common.enums import PrintMode
from src.bp_document.domain.pricing import PriceTable, billed_pages, cost

_TABLE = PriceTable(simplex=Decimal("2.00"), duplex=Decimal("1.00"), color=Decimal("7.00"))


class TestBilledPages:
    def test_simplex_bills_real_pages(self) -> None:
        assert billed_pages(7, PrintMode.SIMPLEX) == 7

    def test_color_bills_real_pages(self) -> None:
        assert billed_pages(3, PrintMode.COLOR) == 3

    def test_duplex_odd_rounds_up(self) -> None:
        assert billed_pages(7, PrintMode.DUPLEX) == 8

    def test_duplex_even_unchanged(self) -> None:
        assert billed_pages(6, PrintMode.DUPLEX) == 6

    @pytest.mark.parametrize("pages", range(1, 40))
    def test_duplex_always_even(self, pages: int) -> None:
        assert billed_pages(pages, PrintMode.DUPLEX) % 2 == 0

    def test_accepts_raw_string_mode(self) -> None:
        assert billed_pages(5, "DUPLEX") == 6  # type: ignore[arg-type]


class TestCost:
    def test_duplex_scenario(self) -> None:
        # 7 pages DUPLEX @1.00 x2 copies -> 8 billed -> 16.00
        quote = cost(7, 2, PrintMode.DUPLEX, _TABLE)
        assert quote.billed_pages == 8
        assert quote.unit_price == Decimal("1.00")
        assert quote.total_cost == Decimal("16.00")

    def test_simplex_five_pages(self) -> None:
        assert cost(5, 1, PrintMode.SIMPLEX, _TABLE).total_cost == Decimal("10.00")

    def test_color_uses_color_price(self) -> None:
        quote = cost(3, 2, PrintMode.COLOR, _TABLE)
        assert quote.unit_price == Decimal("7.00")
        assert quote.total_cost == Decimal("42.00")

    def test_rounds_once_at_the_end(self) -> None:
        # 0.333 * 3 = 0.999 -> 1.00; rounding the unit first would give 0.99
        table = PriceTable(Decimal("0.333"), Decimal("0.333"), Decimal("0.333"))
        assert cost(3, 1, PrintMode.SIMPLEX, table).total_cost == Decimal("1.00")

    def test_half_up(self) -> None:
        table = PriceTable(Decimal("0.125"), Decimal("0.1"), Decimal("1"))
        assert cost(1, 1, PrintMode.SIMPLEX, table).total_cost == Decimal("0.13")

    def test_deterministic(self) -> None:
        assert cost(9, 3, PrintMode.DUPLEX, _TABLE) == cost(9, 3, PrintMode.DUPLEX, _TABLE)

    def test_total_has_scale_two(self) -> None:
        assert cost(1, 1, PrintMode.SIMPLEX, _TABLE).total_cost.as_tuple().exponent == -2

    def test_defaults_to_settings_prices(self) -> None:
        table = PriceTable.from_settings()
        assert cost(2, 1, PrintMode.SIMPLEX).unit_price == table.simplex
