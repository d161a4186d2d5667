import pytest
import logging
import math
import random
from datetime import date

# Import the functions to test
from nse_scanner.analyzers.ema import (
    compute_ema,
    price_relation_to_ema,
    compute_all_emas,
    build_scan_result,
    sort_by_date,
)

from nse_scanner.data.models import PricePoint
from conftest import make_series


def reference_ema(prices, period):
    """Straightforward SMA-seeded EMA used to check the library result."""
    k = 2 / (period + 1)
    ema = sum(prices[:period]) / period
    values = [None] * (period - 1) + [ema]
    for price in prices[period:]:
        ema = price * k + ema * (1 - k)
        values.append(ema)
    return values


class TestComputeEma:
    """Test suite for the EMA calculation."""

    def create_test_data(self, num_days: int, start_price: float = 100.0, trend: str = "neutral") -> list:
        """Create test price data for specified number of days."""
        if trend == "uptrend":
            closes = [start_price + i * 0.1 for i in range(num_days)]
        elif trend == "downtrend":
            closes = [start_price - i * 0.1 for i in range(num_days)]
        else:  # neutral
            closes = [start_price + 0.5 * ((-1) ** i) for i in range(num_days)]
        return make_series(closes)

    def test_seed_is_simple_average(self):
        """Test that the first EMA value equals the price for constant prices."""
        series = make_series([250.0] * 20)

        result = compute_ema(series, 20)

        assert result[:19] == [None] * 19
        assert result[19] == 250.0

    def test_concrete_example(self):
        """Ten 10's then an 11 with a 10-period EMA."""
        series = make_series([10.0] * 10 + [11.0])

        result = compute_ema(series, 10)

        assert result[:9] == [None] * 9
        assert result[9] == pytest.approx(10.0)
        assert result[10] == pytest.approx(11 * (2 / 11) + 10 * (9 / 11))
        assert result[10] == pytest.approx(10.1818, abs=1e-4)
        assert price_relation_to_ema(11.0, result[10]) == "above"

    @pytest.mark.parametrize("length", [1, 5, 9, 10, 11, 50, 250])
    def test_output_aligned_with_input(self, length):
        series = self.create_test_data(length, trend="uptrend")

        assert len(compute_ema(series, 10)) == length

    def test_matches_reference_recurrence(self):
        series = self.create_test_data(120, start_price=500.0, trend="downtrend")
        closes = [point.close for point in series]

        result = compute_ema(series, 20)
        expected = reference_ema(closes, 20)

        assert result[:19] == expected[:19]
        assert result[19:] == pytest.approx(expected[19:], rel=1e-9)

    def test_empty_series(self):
        assert compute_ema([], 10) == []

    def test_non_positive_period(self):
        series = self.create_test_data(30)

        assert compute_ema(series, 0) == []
        assert compute_ema(series, -5) == []

    def test_insufficient_data(self):
        """Test that no EMA is computed with fewer points than the period."""
        series = self.create_test_data(5)

        assert compute_ema(series, 10) == [None] * 5

    def test_single_period_is_price(self):
        series = make_series([101.0, 102.5, 99.0])

        assert compute_ema(series, 1) == [101.0, 102.5, 99.0]

    def test_price_field_selection(self):
        series = self.create_test_data(15, trend="uptrend")
        opens = [point.open for point in series]

        result = compute_ema(series, 5, price_field="open")

        assert result[4:] == pytest.approx(reference_ema(opens, 5)[4:])

    def test_missing_price_field_falls_back_to_close(self):
        series = [
            PricePoint(date=f"2024-01-0{i + 1}", close=close)
            for i, close in enumerate([10.0, 12.0, 14.0])
        ]

        assert compute_ema(series, 3, price_field="open") == [None, None, pytest.approx(12.0)]
        assert compute_ema(series, 3, price_field="volume") == [None, None, pytest.approx(12.0)]

    def test_missing_price_undefines_the_rest(self):
        series = make_series([10.0] * 12)
        series[11] = PricePoint.model_construct(date=series[11].date, close=math.nan)

        result = compute_ema(series, 10)

        assert result[:9] == [None] * 9
        assert result[9:11] == [pytest.approx(10.0), pytest.approx(10.0)]
        assert result[11] is None

    def test_leading_missing_price_does_not_shift_seed(self):
        series = [PricePoint.model_construct(date="2023-12-31", close=math.nan)] + make_series([10.0] * 12)

        assert compute_ema(series, 10) == [None] * 13

    def test_ema_responsiveness(self):
        """Test that EMA follows recent price changes faster than the average."""
        series = make_series([100.0] * 10 + [110.0] * 5)

        result = compute_ema(series, 10)

        assert result[-1] > 105.0
        assert result[-1] < 110.0


class TestPriceRelation:
    """Test suite for the price to EMA relation."""

    def test_above(self):
        assert price_relation_to_ema(101.0, 100.0) == "above"

    def test_below(self):
        assert price_relation_to_ema(99.0, 100.0) == "below"

    def test_equal_is_below(self):
        assert price_relation_to_ema(100.0, 100.0) == "below"

    def test_undefined_ema(self):
        assert price_relation_to_ema(100.0, None) is None
        assert price_relation_to_ema(100.0, math.nan) is None

    def test_undefined_price(self):
        assert price_relation_to_ema(None, 100.0) is None


class TestComputeAllEmas:
    """Test suite for the multi-period EMA calculation."""

    def test_all_periods_with_a_year_of_data(self):
        series = make_series([100.0 + i * 0.1 for i in range(250)])

        result = compute_all_emas(series)

        assert result['current_price'] == series[-1].close
        for period in [10, 20, 50, 200]:
            assert len(result[f'ema_{period}']) == 250
            assert result[f'current_ema_{period}'] is not None
            # Price leads its averages in an uptrend
            assert result[f'current_ema_{period}'] < result['current_price']

    def test_long_period_missing_with_short_history(self):
        series = make_series([100.0 + i for i in range(60)])

        result = compute_all_emas(series)

        assert result['current_ema_50'] is not None
        assert result['current_ema_200'] is None
        assert result['ema_200'] == [None] * 60

    def test_unsorted_input(self):
        series = make_series([100.0 + (i % 7) * 1.5 + i * 0.2 for i in range(80)])
        shuffled = list(series)
        random.Random(7).shuffle(shuffled)

        expected = compute_all_emas(series)
        result = compute_all_emas(shuffled)

        assert result['current_price'] == series[-1].close
        for period in [10, 20, 50]:
            assert result[f'current_ema_{period}'] == pytest.approx(expected[f'current_ema_{period}'])

    def test_empty_input(self):
        result = compute_all_emas([])

        assert result['current_price'] is None
        for period in [10, 20, 50, 200]:
            assert result[f'ema_{period}'] == []
            assert result[f'current_ema_{period}'] is None

    def test_sort_by_date_descending(self):
        series = make_series([1.0, 2.0, 3.0], start=date(2024, 3, 1))

        result = sort_by_date(list(reversed(series[:2])) + [series[2]], ascending=False)

        assert [point.close for point in result] == [3.0, 2.0, 1.0]

    def test_sort_by_date_with_unparseable_date(self, caplog):
        series = make_series([2.0, 1.0, 3.0], start=date(2024, 1, 2))
        series[1] = PricePoint(date="05-Jan-2024", close=1.0)

        with caplog.at_level(logging.WARNING):
            result = sort_by_date(series)

        assert [point.close for point in result] == [1.0, 2.0, 3.0]
        assert "05-Jan-2024" in caplog.text


class TestBuildScanResult:
    """Test suite for scan result creation."""

    def test_result_fields(self):
        series = make_series([100.0] * 40 + [90.0])

        result = build_scan_result("INFY", "Infosys Limited", series)

        assert result.symbol == "INFY"
        assert result.company_name == "Infosys Limited"
        assert result.current_price == 90.0
        assert result.relation_to_ema_10 == "below"
        assert result.relation_to_ema_20 == "below"
        assert result.ema_50 is None
        assert result.relation_to_ema_50 is None
        assert result.relation_to_ema_200 is None
        assert result.ema(10) == result.ema_10
        assert result.relation(20) == "below"

    def test_result_is_immutable(self):
        result = build_scan_result("TCS", "", make_series([100.0] * 12))

        with pytest.raises(Exception):
            result.current_price = 1.0

    def test_empty_history_rejected(self):
        with pytest.raises(ValueError):
            build_scan_result("TCS", "", [])


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
