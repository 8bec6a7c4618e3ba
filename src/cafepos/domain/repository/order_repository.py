"""Abstract repository for Order aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod

from cafepos.domain.model.order import Order, OrderStatus


class OrderRepository(ABC):

    @abstractmethod
    def get_by_id(self, order_id: int) -> Order | None:
        """Return an order by its ID, or None if not found."""

    @abstractmethod
    def get_by_number(self, order_number: str) -> Order | None:
        """Return an order by its order number, or None if not found."""

    @abstractmethod
    def list_all(self) -> list[Order]:
        """Return every order, newest first."""

    @abstractmethod
    def latest_order_number(self, prefix: str) -> str | None:
        """Return the greatest order number starting with *prefix*."""

    @abstractmethod
    def add(self, order: Order) -> None:
        """Insert a new order and assign its ID.

        Raises DuplicateOrderNumberError if the order number is taken.
        """

    @abstractmethod
    def save(self, order: Order, expected_status: OrderStatus | None = None) -> None:
        """Persist changes to an existing order.

        When *expected_status* is given the write only happens if the
        stored order still has that status; otherwise ConflictError.
        """
