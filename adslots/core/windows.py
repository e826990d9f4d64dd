"""
Promotion Window Calculator

Computes the validity windows of consecutive ad slot tokens.

Windows are half-open ``[start_time, end_time)`` in epoch seconds. The
``end_time`` written on-chain is the exclusive end, and the next token's
window starts exactly ``gap_seconds`` after it, so consecutive windows never
overlap for any non-negative gap.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterator, Union

SECONDS_PER_DAY = 24 * 60 * 60


@dataclass(frozen=True)
class PromotionWindow:
    """A token's validity window in epoch seconds."""

    start_time: int
    end_time: int

    def __post_init__(self):
        if self.end_time <= self.start_time:
            raise ValueError(
                f"Window end ({self.end_time}) must be after its start ({self.start_time})"
            )

    @property
    def duration(self) -> int:
        return self.end_time - self.start_time

    @property
    def start_datetime(self) -> datetime:
        return datetime.fromtimestamp(self.start_time, tz=timezone.utc)

    @property
    def end_datetime(self) -> datetime:
        return datetime.fromtimestamp(self.end_time, tz=timezone.utc)


def days_to_seconds(days: Union[int, float]) -> int:
    return int(days * SECONDS_PER_DAY)


def parse_start_time(value: Union[str, int, datetime]) -> int:
    """
    Convert a configured base start time to epoch seconds.

    Accepts epoch seconds, an aware or naive datetime, or an ISO-8601 string
    ending in ``Z``, ``+0000`` or ``+00:00``. Naive values are read as UTC.
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid start time: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip()
        if text.isdigit():
            return int(text)
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            value = datetime.fromisoformat(text)
        except ValueError:
            try:
                value = datetime.strptime(text, "%Y-%m-%dT%H:%M:%S%z")
            except ValueError:
                raise ValueError(f"Invalid start time: {value!r}") from None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return int(value.timestamp())


def _check_duration(validity_duration_seconds: int) -> None:
    if validity_duration_seconds <= 0:
        raise ValueError(
            f"Validity duration must be positive, got {validity_duration_seconds}s"
        )


def first_window(base_start_time: int, validity_duration_seconds: int) -> PromotionWindow:
    """Window of the first token in a batch, seeded by the base start time."""
    _check_duration(validity_duration_seconds)
    return PromotionWindow(base_start_time, base_start_time + validity_duration_seconds)


def next_window(
    previous_end_time: int,
    validity_duration_seconds: int,
    gap_seconds: int,
) -> PromotionWindow:
    """Window that starts ``gap_seconds`` after the previous window's end."""
    _check_duration(validity_duration_seconds)
    start_time = previous_end_time + gap_seconds
    return PromotionWindow(start_time, start_time + validity_duration_seconds)


def window_sequence(
    base_start_time: int,
    validity_duration_seconds: int,
    gap_seconds: int,
    count: int,
) -> Iterator[PromotionWindow]:
    """Yield ``count`` consecutive windows starting at ``base_start_time``."""
    if count <= 0:
        return
    window = first_window(base_start_time, validity_duration_seconds)
    yield window
    for _ in range(count - 1):
        window = next_window(window.end_time, validity_duration_seconds, gap_seconds)
        yield window
