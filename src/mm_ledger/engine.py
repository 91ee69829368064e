# MM Ledger - Personal finance ledger & reporting
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Grouping & aggregation engine for MM Ledger reports.

Reports hand the engine an ordered stream of rows

    (group key, leaf key, values)

already converted into the reporting currency and already sorted so that
rows of one group are contiguous. The engine does not sort. It turns the
stream into a flat list of events that the view layer renders line by
line:

- ``GroupStarted``  when the first row of a group is seen,
- ``LeafLine``      for every row,
- ``GroupClosed``   with the group subtotal, when the next group starts
                    and once more for the last group at end of stream,
- ``GrandTotal``    with the sum of all subtotals, at end of stream.

The subtotal of a group can only be known once the *next* group shows up,
and nothing shows up after the last one. ``GroupAggregator`` is therefore
a two-state machine (no group yet / inside a group) with an explicit
``flush()`` that closes the last group and emits the grand total.

``values`` is a tuple so that one pass can accumulate several columns at
once (budget, actual and difference for budget reports). A plain number is
accepted for single-column reports.
"""

from collections.abc import Hashable, Iterable
from dataclasses import dataclass
from typing import Any, Union

Number = Union[int, float]
Values = tuple[float, ...]


@dataclass(frozen=True)
class GroupStarted:
    key: Hashable


@dataclass(frozen=True)
class LeafLine:
    key: Hashable
    leaf: Any
    values: Values


@dataclass(frozen=True)
class GroupClosed:
    key: Hashable
    subtotal: Values


@dataclass(frozen=True)
class GrandTotal:
    total: Values


Event = Union[GroupStarted, LeafLine, GroupClosed, GrandTotal]


class GroupAggregator:
    """
    Subtotal-on-group-change state machine.

    Usage::

        agg = GroupAggregator(width=1)
        events = []
        for key, leaf, value in rows:
            events.extend(agg.feed(key, leaf, value))
        events.extend(agg.flush())

    ``flush()`` must be called exactly once, after the last row.
    """

    def __init__(self, width: int = 1) -> None:
        if width < 1:
            raise ValueError("Aggregator width must be at least 1.")
        self._width = width
        self._in_group = False
        self._key: Hashable = None
        self._subtotal: list[float] = [0.0] * width
        self._total: list[float] = [0.0] * width
        self._flushed = False

    @property
    def in_group(self) -> bool:
        return self._in_group

    def _normalize(self, values: Union[Number, Iterable[Number]]) -> Values:
        if isinstance(values, (int, float)):
            out = (float(values),)
        else:
            out = tuple(float(v) for v in values)
        if len(out) != self._width:
            raise ValueError(
                f"Expected {self._width} value(s) per row, got {len(out)}."
            )
        return out

    def _close_group(self) -> GroupClosed:
        closed = GroupClosed(key=self._key, subtotal=tuple(self._subtotal))
        self._total = [t + s for t, s in zip(self._total, self._subtotal)]
        self._subtotal = [0.0] * self._width
        return closed

    def feed(
        self,
        key: Hashable,
        leaf: Any,
        values: Union[Number, Iterable[Number]],
    ) -> list[Event]:
        """Consume one row and return the events it triggers."""
        if self._flushed:
            raise RuntimeError("Cannot feed rows after flush().")

        row_values = self._normalize(values)
        events: list[Event] = []

        if not self._in_group:
            self._in_group = True
            self._key = key
            events.append(GroupStarted(key=key))
        elif key != self._key:
            events.append(self._close_group())
            self._key = key
            events.append(GroupStarted(key=key))

        self._subtotal = [s + v for s, v in zip(self._subtotal, row_values)]
        events.append(LeafLine(key=key, leaf=leaf, values=row_values))
        return events

    def flush(self) -> list[Event]:
        """Close the current group (if any) and emit the grand total."""
        if self._flushed:
            raise RuntimeError("flush() has already been called.")
        self._flushed = True

        events: list[Event] = []
        if self._in_group:
            events.append(self._close_group())
            self._in_group = False
        events.append(GrandTotal(total=tuple(self._total)))
        return events


def aggregate(
    rows: Iterable[tuple[Hashable, Any, Union[Number, Iterable[Number]]]],
    width: int = 1,
) -> list[Event]:
    """
    Run a whole pre-sorted row stream through a ``GroupAggregator``.

    Args:
        rows: Iterable of (group key, leaf, values) tuples, contiguous per
            group key.
        width: Number of value columns per row.

    Returns:
        The complete event list, always ending with a ``GrandTotal``.
    """
    agg = GroupAggregator(width=width)
    events: list[Event] = []
    for key, leaf, values in rows:
        events.extend(agg.feed(key, leaf, values))
    events.extend(agg.flush())
    return events
