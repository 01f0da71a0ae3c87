"""Poll-driven debounce for re-scan triggers.

Each trigger for a key resets that key's deadline and replaces its pending
payload. ``poll`` runs the callback for keys whose deadline has passed with
no newer trigger. Everything runs on the polling thread, so callbacks for a
key never overlap or run out of order.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Hashable
from dataclasses import dataclass


@dataclass
class _Pending:
    deadline: float
    payload: object
    sequence: int


class Debouncer:
    """Coalesce bursts of triggers per key into one delayed callback."""

    def __init__(
        self,
        delay_seconds: float,
        callback: Callable[[Hashable, object], None],
        *,
        monotonic: Callable[[], float] = time.monotonic,
    ) -> None:
        self.delay_seconds = max(0.0, delay_seconds)
        self._callback = callback
        self._monotonic = monotonic
        self._pending: dict[Hashable, _Pending] = {}
        self._sequence = 0

    def trigger(self, key: Hashable, payload: object = None) -> None:
        """Schedule ``key``, superseding any payload still waiting for it."""
        self._sequence += 1
        self._pending[key] = _Pending(
            deadline=self._monotonic() + self.delay_seconds,
            payload=payload,
            sequence=self._sequence,
        )

    def cancel(self, key: Hashable) -> bool:
        """Drop a pending trigger; return whether one was waiting."""
        return self._pending.pop(key, None) is not None

    def pending(self, key: Hashable) -> bool:
        return key in self._pending

    def next_deadline(self) -> float | None:
        """Earliest pending deadline, useful as a poll timeout."""
        if not self._pending:
            return None
        return min(item.deadline for item in self._pending.values())

    def poll(self) -> int:
        """Run callbacks for every elapsed key in trigger order; return how many ran."""
        now = self._monotonic()
        due = sorted(
            ((key, item) for key, item in self._pending.items() if item.deadline <= now),
            key=lambda pair: pair[1].sequence,
        )
        ran = 0
        for key, item in due:
            # An earlier callback may have re-triggered or cancelled this key.
            if self._pending.get(key) is not item:
                continue
            del self._pending[key]
            self._callback(key, item.payload)
            ran += 1
        return ran
