"""Tests for the JSON-file repositories, against a temporary directory."""

import json
import threading
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from cafepos.application.create_order import CreateOrderHandler
from cafepos.application.dto import OptionSelectionSpec, OrderItemSpec
from cafepos.domain.exceptions import (
    ConflictError,
    DuplicateOrderNumberError,
    InsufficientStockError,
)
from cafepos.domain.model.order import OrderStatus
from cafepos.infrastructure.persistence.json_order_repository import JsonOrderRepository
from cafepos.infrastructure.persistence.json_order_sequence import JsonOrderSequence
from cafepos.infrastructure.persistence.json_product_repository import (
    JsonProductRepository,
)
from cafepos.infrastructure.persistence.json_settings_repository import (
    JsonSettingsRepository,
)
from tests.fakes import RecordingPublisher, extras_group, make_product, size_group

NOW = datetime(2026, 10, 19, 7, 45, tzinfo=timezone.utc)


@pytest.fixture
def products(tmp_path):
    repo = JsonProductRepository(tmp_path / "products.json")
    repo.save(make_product("1", "Latte", stock=10, groups=[size_group(), extras_group()]))
    repo.save(make_product("2", "Croissant", "45", stock=2))
    return repo


def _create_order(tmp_path, products, *items):
    handler = CreateOrderHandler(
        JsonOrderRepository(tmp_path / "orders.json"),
        products,
        JsonSettingsRepository(tmp_path / "settings.json"),
        JsonOrderSequence(tmp_path / "counters.json"),
        RecordingPublisher(),
        clock=lambda: NOW,
    )
    return handler.handle(list(items), order_type="Dine-In", payment_method="QRCode")


class TestJsonProductRepository:

    def test_creates_empty_file(self, tmp_path):
        JsonProductRepository(tmp_path / "nested" / "products.json")
        assert json.loads((tmp_path / "nested" / "products.json").read_text()) == []

    def test_round_trip_keeps_options(self, products):
        latte = products.get_by_id("1")
        assert latte.price.amount == Decimal("100")
        assert [g.name for g in latte.option_groups] == ["Size", "Extras"]
        assert latte.find_option_group("Extras").find_value("No Whip").price_modifier == Decimal("-5")
        assert latte.image_url == "/img/1.png"

    def test_adjust_stock_is_conditional(self, products):
        assert products.adjust_stock("2", -2).stock_count == 0
        with pytest.raises(InsufficientStockError):
            products.adjust_stock("2", -1)
        assert products.get_by_id("2").stock_count == 0

    def test_adjust_unknown_product(self, products):
        assert products.adjust_stock("99", -1) is None

    def test_concurrent_decrements_never_oversell(self, tmp_path, products):
        products.save(make_product("3", "Cookie", "30", stock=5))
        sold: list[int] = []
        failures: list[Exception] = []

        def buy():
            repo = JsonProductRepository(tmp_path / "products.json")
            try:
                repo.adjust_stock("3", -1)
                sold.append(1)
            except InsufficientStockError as exc:
                failures.append(exc)

        threads = [threading.Thread(target=buy) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(sold) == 5
        assert len(failures) == 3
        assert products.get_by_id("3").stock_count == 0

    def test_reads_plain_number_prices(self, tmp_path):
        path = tmp_path / "products.json"
        path.write_text(json.dumps([{"id": "7", "name": "Tea", "price": 35.5, "stock_count": 3}]))
        tea = JsonProductRepository(path).get_by_id("7")
        assert tea.price.amount == Decimal("35.5")
        assert tea.is_available is True
        assert tea.option_groups == []


class TestJsonOrderRepository:

    def test_round_trip(self, tmp_path, products):
        dto = _create_order(
            tmp_path,
            products,
            OrderItemSpec(
                "1",
                2,
                (
                    OptionSelectionSpec("Size", ("Large",)),
                    OptionSelectionSpec("Extras", ("Extra Shot", "Oat Milk")),
                ),
                "  less sugar ",
            ),
        )

        repo = JsonOrderRepository(tmp_path / "orders.json")
        order = repo.get_by_number(dto.order_number)
        assert order.id == dto.id
        assert order.status == OrderStatus.PENDING
        assert order.created_at == NOW

        item = order.items[0]
        assert item.item_price.amount == Decimal("145")
        assert item.item_total.amount == Decimal("290")
        assert item.customization_notes == "less sugar"
        assert [v.name for v in item.selected_options[1].values] == ["Extra Shot", "Oat Milk"]
        assert order.total.amount == Decimal("310.30")

    def test_duplicate_number_rejected(self, tmp_path, products):
        dto = _create_order(tmp_path, products, OrderItemSpec("2", 1))
        repo = JsonOrderRepository(tmp_path / "orders.json")
        clone = repo.get_by_id(dto.id)
        with pytest.raises(DuplicateOrderNumberError):
            repo.add(clone)

    def test_save_is_compare_and_set(self, tmp_path, products):
        dto = _create_order(tmp_path, products, OrderItemSpec("2", 1))
        repo = JsonOrderRepository(tmp_path / "orders.json")

        first = repo.get_by_id(dto.id)
        second = repo.get_by_id(dto.id)

        previous = first.transition_to(OrderStatus.CANCELLED, NOW)
        repo.save(first, expected_status=previous)

        previous = second.transition_to(OrderStatus.CANCELLED, NOW)
        with pytest.raises(ConflictError):
            repo.save(second, expected_status=previous)

    def test_latest_number_and_sequence(self, tmp_path, products):
        _create_order(tmp_path, products, OrderItemSpec("2", 1))
        dto = _create_order(tmp_path, products, OrderItemSpec("2", 1))
        assert dto.order_number == "ORD-20261019-0002"

        repo = JsonOrderRepository(tmp_path / "orders.json")
        assert repo.latest_order_number("ORD-20261019-") == "ORD-20261019-0002"
        assert repo.latest_order_number("ORD-20261020-") is None


class TestJsonOrderSequence:

    def test_counts_per_key(self, tmp_path):
        seq = JsonOrderSequence(tmp_path / "counters.json")
        assert seq.next_value("20261019") == 1
        assert seq.next_value("20261019") == 2
        assert seq.next_value("20261020") == 1
        assert json.loads((tmp_path / "counters.json").read_text()) == {
            "20261019": 2,
            "20261020": 1,
        }

    def test_floor_wins_over_lost_counter(self, tmp_path):
        seq = JsonOrderSequence(tmp_path / "counters.json")
        assert seq.next_value("20261019", floor=41) == 42


class TestJsonSettingsRepository:

    def test_defaults_written_on_first_read(self, tmp_path):
        path = tmp_path / "settings.json"
        settings = JsonSettingsRepository(path).get()
        assert settings.tax_rate == Decimal("7")
        assert json.loads(path.read_text())["tax_rate"] == "7"

    def test_round_trip(self, tmp_path):
        repo = JsonSettingsRepository(tmp_path / "settings.json")
        settings = repo.get()
        settings.update_tax(tax_rate=Decimal("10"), included_in_price=True)
        repo.save(settings)

        reloaded = JsonSettingsRepository(tmp_path / "settings.json").get()
        assert reloaded.tax_rate == Decimal("10")
        assert reloaded.tax_included_in_price is True
        assert reloaded.updated_at == settings.updated_at
