"""Abstract counter used to hand out daily order sequence numbers."""

from __future__ import annotations

from abc import ABC, abstractmethod


class OrderSequence(ABC):

    @abstractmethod
    def next_value(self, key: str, floor: int = 0) -> int:
        """Atomically increment the counter for *key* and return it.

        The counter is first raised to at least *floor*, so the returned
        value is always greater than both the previous value and *floor*.
        """
