import itertools

import pytest

from jobboard_currency.models.constants import SUPPORTED_CODES
from jobboard_currency.services.money import group_thousands, round_whole
from jobboard_currency.services.rates.conversion import convert_amount

from .conftest import RATES

SMALL_RATIO_CODES = ("USD", "GBP", "EUR", "CAD")


class TestConvert:
    @pytest.mark.parametrize("code", sorted(SUPPORTED_CODES))
    def test_same_currency_is_identity(self, ready_service, code):
        assert ready_service.convert(1234.5, code, code) == 1234.5

    def test_round_trip_within_one_unit(self, ready_service):
        for a, b in itertools.permutations(SMALL_RATIO_CODES, 2):
            there = ready_service.convert(250_000, a, b)
            back = ready_service.convert(there, b, a)
            assert abs(back - 250_000) <= 1, (a, b, there, back)

    @pytest.mark.parametrize("code", ["NGN", "KES", "ZAR", "GHS"])
    def test_round_trip_through_stronger_currency_within_half_rate(self, ready_service, code):
        # The USD leg rounds to whole dollars, so coming back can be off by up
        # to half of one dollar expressed in ``code``.
        amount = 1_000_000
        there = ready_service.convert(amount, code, "USD")
        back = ready_service.convert(there, "USD", code)
        assert abs(back - amount) <= RATES[code] / 2
        assert there == round_whole(amount / RATES[code])

    def test_pivots_through_usd(self, ready_service):
        # 100 GBP -> 125 USD -> 187500 NGN
        assert ready_service.convert(100, "GBP", "NGN") == 187_500
        assert ready_service.convert(100, "USD", "GBP") == 80
        assert ready_service.convert(80, "GBP", "USD") == 100

    def test_defaults_to_selected_currency(self, ready_service):
        ready_service.set_selected_currency("EUR")
        assert ready_service.convert(100, "USD") == 90

    def test_rounds_to_whole_units(self, ready_service):
        assert ready_service.convert(10, "USD", "CAD") == 14  # 13.5 rounds up
        assert isinstance(ready_service.convert(7, "GBP", "EUR"), int)

    def test_empty_table_passes_through(self, service):
        # nothing loaded yet
        for a, b in itertools.product(sorted(SUPPORTED_CODES), repeat=2):
            assert service.convert(4321.7, a, b) == 4321.7

    def test_unknown_currency_converts_at_one(self, ready_service):
        assert ready_service.convert(100, "USD", "JPY") == 100
        assert ready_service.convert(100, "JPY", "GBP") == 80


class TestConvertAmount:
    def test_result_carries_cross_rate(self):
        result = convert_amount(200, "GBP", "EUR", RATES)
        assert result.rate == pytest.approx(0.9 / 0.8)
        assert result.converted_amount == 225
        assert result.from_currency == "GBP"
        assert result.to_currency == "EUR"

    def test_custom_base(self):
        rates = {"GBP": 1.0, "USD": 1.25}
        assert convert_amount(100, "GBP", "USD", rates, base="GBP").converted_amount == 125


class TestFormat:
    def test_thousands_grouping(self, service):
        assert service.format(1234, "USD") == "$1,234"
        assert service.format(1234567, "GBP") == "£1,234,567"
        assert service.format(950, "KES") == "KSh950"

    def test_no_decimals(self, service):
        assert service.format(1234.56, "EUR") == "€1,235"

    def test_defaults_to_selected_currency(self, service):
        service.set_selected_currency("NGN")
        assert service.format(5000) == "₦5,000"

    def test_unknown_code_uses_raw_code(self, service):
        assert service.format(1000, "JPY") == "JPY1,000"

    def test_money_helpers(self):
        assert round_whole(2.5) == 3
        assert round_whole(2.4) == 2
        assert group_thousands(0) == "0"
        assert group_thousands(1000000.2) == "1,000,000"


class TestDisplayHelpers:
    def test_salary_range_in_posting_currency(self, ready_service):
        ready_service.set_selected_currency("GBP")
        assert ready_service.format_salary_range(40000, 55000, "GBP") == "£40,000 - £55,000"

    def test_salary_range_converted(self, ready_service):
        ready_service.set_selected_currency("USD")
        assert ready_service.format_salary_range(40000, 56000, "GBP") == "$50,000 - $70,000"

    def test_salary_range_without_conversion(self, ready_service):
        ready_service.set_selected_currency("USD")
        text = ready_service.format_salary_range(90000, 130000, "EUR", convert=False)
        assert text == "€90,000 - €130,000"

    def test_price_in_selected_currency(self, ready_service):
        ready_service.set_selected_currency("ZAR")
        assert ready_service.format_price(29) == "R522"

    def test_currency_info_and_label(self, service):
        info = service.currency_info("GHS")
        assert info is not None and info.symbol == "₵" and info.name == "Ghanaian Cedi"
        assert service.currency_info("XYZ") is None
        assert service.display_label("XYZ") == "XYZ"
        assert service.display_label("CAD").endswith("CAD (C$)")
