"""Tests for daily forecast aggregation."""

import pytest

from weatherdesk.services.forecast_aggregation import (
    ForecastDay,
    ForecastSample,
    aggregate_forecast,
    round_temperature,
)


def _sample(ts: str, temp: float | None = None, **kwargs) -> ForecastSample:
    return ForecastSample(timestamp=ts, temp=temp, **kwargs)


class TestGrouping:
    def test_two_dates_give_min_max_in_date_order(self):
        samples = [
            _sample("2024-01-02 00:00:00", -1),
            _sample("2024-01-01 00:00:00", 2),
            _sample("2024-01-01 03:00:00", 5),
            _sample("2024-01-01 06:00:00", 8),
            _sample("2024-01-02 03:00:00", 3),
        ]

        days = aggregate_forecast(samples)

        assert [(d.date, d.min, d.max) for d in days] == [
            ("2024-01-01", 2, 8),
            ("2024-01-02", -1, 3),
        ]

    def test_temp_min_and_temp_max_preferred_over_temp(self):
        samples = [
            _sample("2024-03-01 09:00:00", 10, temp_min=7.5, temp_max=11.2),
            _sample("2024-03-01 12:00:00", 12, temp_min=9.0, temp_max=14.1),
        ]

        (day,) = aggregate_forecast(samples)

        assert day.min == 7.5
        assert day.max == 14.1

    def test_first_sample_of_day_supplies_description_and_icon(self):
        samples = [
            _sample("2024-01-01 00:00:00", 1, description="clear sky", icon="01n"),
            _sample("2024-01-01 03:00:00", 1, description="rain", icon="10n"),
            _sample("2024-01-01 06:00:00", 1, description="rain", icon="10d"),
        ]

        (day,) = aggregate_forecast(samples)

        assert day.description == "clear sky"
        assert day.icon == "01n"

    def test_empty_description_falls_through_to_next_sample(self):
        samples = [
            _sample("2024-01-01 00:00:00", 1),
            _sample("2024-01-01 03:00:00", 1, description="snow", icon="13d"),
        ]

        (day,) = aggregate_forecast(samples)

        assert (day.description, day.icon) == ("snow", "13d")


class TestLimits:
    def test_empty_input_gives_empty_output(self):
        assert aggregate_forecast([]) == []

    def test_single_sample_gives_one_day(self):
        days = aggregate_forecast([_sample("2024-05-05 12:00:00", 20.0)])
        assert days == [
            ForecastDay(date="2024-05-05", min=20.0, max=20.0, description="", icon="")
        ]

    def test_output_capped_at_max_days(self):
        samples = [_sample(f"2024-01-{d:02d} 12:00:00", d) for d in range(1, 10)]

        days = aggregate_forecast(samples, max_days=6)

        assert len(days) == 6
        assert days[0].date == "2024-01-01"
        assert days[-1].date == "2024-01-06"

    def test_non_positive_max_days_gives_empty_output(self):
        assert aggregate_forecast([_sample("2024-01-01 00:00:00", 1)], max_days=0) == []


class TestMissingData:
    def test_missing_temperatures_default_to_zero(self):
        (day,) = aggregate_forecast([_sample("2024-01-01 00:00:00")])
        assert (day.min, day.max) == (0.0, 0.0)

    def test_samples_without_any_time_are_skipped(self):
        samples = [ForecastSample(temp=5), _sample("2024-01-01 00:00:00", 1)]
        assert [d.date for d in aggregate_forecast(samples)] == ["2024-01-01"]

    def test_epoch_seconds_used_when_text_missing(self):
        # 2024-01-01T12:00:00Z
        sample = ForecastSample(epoch_seconds=1704110400, temp=4)
        (day,) = aggregate_forecast([sample])
        assert day.date == "2024-01-01"


class TestRounding:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (2.25, 2.3),
            (-2.25, -2.3),
            (0.05, 0.1),
            (-0.05, -0.1),
            (1.04, 1.0),
            (7, 7.0),
        ],
    )
    def test_half_away_from_zero(self, value, expected):
        assert round_temperature(value) == expected

    def test_day_values_are_rounded(self):
        (day,) = aggregate_forecast([_sample("2024-01-01 00:00:00", 3.14159)])
        assert day.min == 3.1
        assert day.max == 3.1

    @pytest.mark.parametrize(
        "value", [float("inf"), float("-inf"), float("nan")]
    )
    def test_non_finite_treated_as_missing(self, value):
        assert round_temperature(value) == 0.0

    @pytest.mark.parametrize("value", [1e27, -1e30, 1e300])
    def test_huge_values_pass_through(self, value):
        assert round_temperature(value) == value

    def test_day_with_huge_reading_still_aggregates(self):
        samples = [
            _sample("2024-01-01 00:00:00", 1e30),
            _sample("2024-01-01 03:00:00", 2.25),
        ]
        (day,) = aggregate_forecast(samples)
        assert (day.min, day.max) == (2.3, 1e30)
