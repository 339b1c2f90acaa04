from __future__ import annotations

from typing import Iterator, Optional

from osi_contract.schemas.common import Timestamp


def _nanos(ts: Optional[Timestamp]) -> int:
    return ts.total_nanos if ts is not None else 0


def first_update_time(
    cycle_time: Optional[Timestamp],
    offset: Optional[Timestamp] = None,
    start_time: Optional[Timestamp] = None,
) -> Optional[Timestamp]:
    """Smallest ``offset + k * cycle_time`` (k >= 0) not earlier than ``start_time``.

    The offset is phase against a virtual start time of zero, so re-running
    from a later start keeps the same update grid. Computed in integer
    nanoseconds; returns None when the cycle time is absent or not positive.
    """
    period = _nanos(cycle_time)
    if cycle_time is None or period <= 0:
        return None
    phase = _nanos(offset)
    lag = max(0, _nanos(start_time) - phase)
    steps = -(-lag // period)
    return Timestamp.from_nanos(phase + steps * period)


def update_instants(
    cycle_time: Optional[Timestamp],
    offset: Optional[Timestamp] = None,
    start_time: Optional[Timestamp] = None,
    count: int = 1,
) -> Iterator[Timestamp]:
    first = first_update_time(cycle_time, offset, start_time)
    if first is None:
        return
    for k in range(count):
        yield Timestamp.from_nanos(first.total_nanos + k * cycle_time.total_nanos)


def align_up(value: Timestamp, step: Optional[Timestamp]) -> Timestamp:
    """Snap ``value`` up to the next multiple of ``step`` (unchanged without a step)."""
    grid = _nanos(step)
    if step is None or grid <= 0:
        return value
    return Timestamp.from_nanos(-(-value.total_nanos // grid) * grid)
