from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Any, Iterable, Mapping

from ..utils.errors import ValidationError

_CENT = Decimal("0.01")
_SECONDS_PER_HOUR = Decimal(3600)
_MICROS_PER_SECOND = Decimal(1_000_000)


@dataclass(frozen=True)
class PriceBreakdown:
    duration_hours: Decimal
    base_price: Decimal
    equipment_total: Decimal
    total_price: Decimal


def _to_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError) as exc:
        raise ValidationError(f"Invalid monetary amount: {value!r}") from exc


def _read_daily_rate(item: Any) -> Any:
    if isinstance(item, Mapping):
        return item.get("daily_rate")
    if isinstance(item, (Decimal, int, float, str)):
        return item
    return getattr(item, "daily_rate", None)


def _seconds(delta: timedelta) -> Decimal:
    # Exact arithmetic; timedelta.total_seconds() goes through float.
    whole = Decimal(delta.days * 86400 + delta.seconds)
    return whole + Decimal(delta.microseconds) / _MICROS_PER_SECOND


def duration_hours(start_time: datetime, end_time: datetime) -> Decimal:
    """Fractional hours between two instants. No rounding to whole hours."""
    hours = _seconds(end_time - start_time) / _SECONDS_PER_HOUR
    if hours <= 0:
        raise ValidationError(
            "End time must be after start time",
            {"end_time": "must be after start_time"},
        )
    return hours


def compute_price_breakdown(
    hourly_rate: Any,
    start_time: datetime,
    end_time: datetime,
    equipment: Iterable[Any] = (),
) -> PriceBreakdown:
    """Price a booking: room rate × duration plus each item's daily rate once.

    ``equipment`` accepts Equipment rows, mappings with ``daily_rate`` or bare
    amounts. Quantity never multiplies the rate and duration never scales it.
    """
    rate = _to_decimal(hourly_rate)
    if rate < 0:
        raise ValidationError("Hourly rate cannot be negative")
    hours = duration_hours(start_time, end_time)
    base = rate * hours

    equipment_total = Decimal("0")
    for item in equipment:
        daily = _to_decimal(_read_daily_rate(item))
        if daily < 0:
            raise ValidationError("Equipment daily rate cannot be negative")
        equipment_total += daily

    total = (base + equipment_total).quantize(_CENT, rounding=ROUND_HALF_UP)
    return PriceBreakdown(
        duration_hours=hours,
        base_price=base.quantize(_CENT, rounding=ROUND_HALF_UP),
        equipment_total=equipment_total.quantize(_CENT, rounding=ROUND_HALF_UP),
        total_price=total,
    )


def compute_price(
    hourly_rate: Any,
    start_time: datetime,
    end_time: datetime,
    equipment: Iterable[Any] = (),
) -> Decimal:
    return compute_price_breakdown(hourly_rate, start_time, end_time, equipment).total_price
