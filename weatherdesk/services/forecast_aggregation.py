"""Forecast aggregation service.

Collapses the provider's 3-hour forecast samples into daily summaries.

Per calendar date:
- min: lowest temp_min (falling back to temp) across the date's samples
- max: highest temp_max (falling back to temp) across the date's samples
- description / icon: first non-empty value seen for the date

Description and icon are first-wins, not most-frequent.

Known limitation: a missing temperature counts as 0, so a day whose samples
all lack temperatures comes out as min=max=0. Treat an all-zero day as
missing upstream data, not as a real reading.
"""

import math
from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import ROUND_HALF_UP, Decimal

# Days returned to the client by GET /api/forecast
DEFAULT_MAX_DAYS = 6

# "YYYY-MM-DD"
_DATE_KEY_LENGTH = 10

_ONE_DECIMAL = Decimal("0.1")

# Floats at or above 2**53 are whole numbers already
_EXACT_INTEGER_LIMIT = 2.0**53


@dataclass(frozen=True)
class ForecastSample:
    """One fine-grained forecast reading.

    Attributes:
        timestamp: "YYYY-MM-DD HH:MM:SS" text, or None.
        epoch_seconds: Unix time of the reading, used when timestamp is None.
        temp: Representative temperature.
        temp_min: Low for the sample window.
        temp_max: High for the sample window.
        description: Human-readable condition text.
        icon: Provider icon code.
    """

    timestamp: str | None = None
    epoch_seconds: int | None = None
    temp: float | None = None
    temp_min: float | None = None
    temp_max: float | None = None
    description: str = ""
    icon: str = ""

    @property
    def date_key(self) -> str | None:
        """Calendar date of the sample, or None if it carries no time at all."""
        if self.timestamp:
            return self.timestamp[:_DATE_KEY_LENGTH]
        if self.epoch_seconds is not None:
            moment = datetime.fromtimestamp(self.epoch_seconds, tz=UTC)
            return moment.date().isoformat()
        return None

    @property
    def low(self) -> float:
        return _first_present(self.temp_min, self.temp)

    @property
    def high(self) -> float:
        return _first_present(self.temp_max, self.temp)


@dataclass(frozen=True)
class ForecastDay:
    """Daily summary derived from same-date samples. Never persisted."""

    date: str
    min: float
    max: float
    description: str
    icon: str

    def to_dict(self) -> dict:
        return {
            "date": self.date,
            "min": self.min,
            "max": self.max,
            "description": self.description,
            "icon": self.icon,
        }


@dataclass
class _DayBucket:
    low: float
    high: float
    description: str = ""
    icon: str = ""

    def add(self, sample: ForecastSample) -> None:
        self.low = min(self.low, sample.low)
        self.high = max(self.high, sample.high)
        if not self.description and sample.description:
            self.description = sample.description
        if not self.icon and sample.icon:
            self.icon = sample.icon


def _first_present(*values: float | None) -> float:
    for value in values:
        if value is not None:
            return value
    return 0.0


def round_temperature(value: float) -> float:
    """Round to one decimal place, halves away from zero.

    Goes through the shortest decimal repr, so 2.25 rounds to 2.3 rather
    than to whatever its binary approximation suggests.

    Examples:
        >>> round_temperature(2.25)
        2.3
        >>> round_temperature(-2.25)
        -2.3

    Non-finite values come out as 0, the same as a missing reading.
    """
    if not math.isfinite(value):
        return 0.0
    if abs(value) >= _EXACT_INTEGER_LIMIT:
        return float(value)
    rounded = Decimal(repr(value)).quantize(_ONE_DECIMAL, rounding=ROUND_HALF_UP)
    return float(rounded)


def aggregate_forecast(
    samples: list[ForecastSample],
    max_days: int = DEFAULT_MAX_DAYS,
) -> list[ForecastDay]:
    """Group samples by date and summarize each date.

    Args:
        samples: Forecast samples in provider order.
        max_days: Maximum number of days to return.

    Returns:
        Daily summaries sorted by date, at most max_days long. Empty when
        samples is empty or max_days is not positive.
    """
    if max_days <= 0:
        return []

    buckets: dict[str, _DayBucket] = {}
    for sample in samples:
        key = sample.date_key
        if not key:
            continue
        bucket = buckets.get(key)
        if bucket is None:
            buckets[key] = _DayBucket(
                low=sample.low,
                high=sample.high,
                description=sample.description,
                icon=sample.icon,
            )
        else:
            bucket.add(sample)

    # YYYY-MM-DD keys sort chronologically as plain strings
    days: list[ForecastDay] = []
    for key in sorted(buckets)[:max_days]:
        bucket = buckets[key]
        days.append(
            ForecastDay(
                date=key,
                min=round_temperature(bucket.low),
                max=round_temperature(bucket.high),
                description=bucket.description,
                icon=bucket.icon,
            )
        )
    return days
