"""Unit tests for the OrderPricer domain service."""

from decimal import Decimal

import pytest

from cafepos.domain.exceptions import (
    EntityNotFoundError,
    InsufficientPaymentError,
    InsufficientStockError,
    InvalidOptionError,
    MissingRequiredOptionError,
    ProductUnavailableError,
    ValidationError,
)
from cafepos.domain.model.order import PaymentMethod
from cafepos.domain.model.value_objects import Money, TaxPolicy
from cafepos.domain.service.order_pricer import (
    LineItemRequest,
    OptionSelection,
    OrderPricer,
    settle_payment,
)
from tests.fakes import FakeProductRepository, extras_group, make_product, size_group

TAX_ON_TOP = TaxPolicy(Decimal("7"))
TAX_INCLUDED = TaxPolicy(Decimal("7"), included_in_price=True)


def _pricer(*products, policy: TaxPolicy = TAX_ON_TOP) -> OrderPricer:
    if not products:
        products = (make_product(groups=[size_group(), extras_group()]),)
    return OrderPricer(FakeProductRepository(list(products)), policy)


def _large(qty: int = 2, *extra: OptionSelection) -> LineItemRequest:
    return LineItemRequest(
        product_id="1",
        quantity=qty,
        selected_options=(OptionSelection("Size", ("Large",)), *extra),
    )


class TestPricingScenarios:

    def test_tax_on_top(self):
        priced = _pricer().price([_large(2)])
        item = priced.items[0]
        assert item.base_price == Money.of("100")
        assert item.options_total == Decimal("20")
        assert item.item_price == Money.of("120")
        assert item.item_total == Money.of("240")
        assert priced.subtotal == Money.of("240")
        assert priced.tax == Money.of("16.80")
        assert priced.total == Money.of("256.80")

    def test_tax_included(self):
        priced = _pricer(policy=TAX_INCLUDED).price([_large(2)])
        assert priced.subtotal == Money.of("240")
        assert priced.total == Money.of("240")
        assert priced.tax == Money.of("15.70")

    def test_subtotal_is_sum_of_item_totals(self):
        products = (
            make_product("1", "Latte", "65.50", groups=[extras_group()]),
            make_product("2", "Croissant", "45.25"),
        )
        priced = _pricer(*products).price([
            LineItemRequest("1", 3, (OptionSelection("Extras", ("Extra Shot", "No Whip")),)),
            LineItemRequest("2", 1),
        ])
        # (65.50 + 15 - 5) * 3 + 45.25
        assert priced.subtotal == Money.of("271.75")
        assert priced.subtotal.amount == sum(i.item_total.amount for i in priced.items)

    def test_snapshot_captures_catalog_values(self):
        item = _pricer().price([_large(1)]).items[0]
        assert item.product_id == "1"
        assert item.product_snapshot.name == "Latte"
        assert item.product_snapshot.price == Money.of("100")
        assert item.product_snapshot.image_url == "/img/1.png"

    def test_modifier_comes_from_catalog(self):
        item = _pricer().price([_large(1)]).items[0]
        (size,) = item.selected_options
        assert size.group_name == "Size"
        assert [(v.name, v.price_modifier) for v in size.values] == [("Large", Decimal("20"))]

    def test_empty_optional_group_is_dropped(self):
        item = _pricer().price([_large(1, OptionSelection("Extras", ()))]).items[0]
        assert [g.group_name for g in item.selected_options] == ["Size"]

    def test_notes_are_kept(self):
        request = LineItemRequest(
            "1", 1, (OptionSelection("Size", ("Small",)),), customization_notes=" less ice "
        )
        assert _pricer().price([request]).items[0].customization_notes == "less ice"


class TestItemValidation:

    def test_no_items_rejected(self):
        with pytest.raises(ValidationError, match="at least one item"):
            _pricer().price([])

    def test_unknown_product(self):
        with pytest.raises(EntityNotFoundError, match="Product with ID 99 not found"):
            _pricer().price([LineItemRequest("99", 1)])

    def test_unavailable_product(self):
        with pytest.raises(ProductUnavailableError, match="not available"):
            _pricer(make_product(available=False)).price([LineItemRequest("1", 1)])

    def test_insufficient_stock(self):
        with pytest.raises(InsufficientStockError, match="Available: 1, Requested: 2"):
            _pricer(make_product(stock=1)).price([LineItemRequest("1", 2)])

    def test_lines_for_same_product_share_stock(self):
        pricer = _pricer(make_product(stock=3))
        with pytest.raises(InsufficientStockError, match="Available: 1, Requested: 2"):
            pricer.price([LineItemRequest("1", 2), LineItemRequest("1", 2)])

    def test_stock_exactly_enough(self):
        priced = _pricer(make_product(stock=2)).price([LineItemRequest("1", 2)])
        assert priced.items[0].quantity.value == 2

    def test_zero_quantity_rejected(self):
        with pytest.raises(ValidationError, match="at least 1"):
            _pricer(make_product()).price([LineItemRequest("1", 0)])

    def test_availability_checked_before_options(self):
        product = make_product(available=False, groups=[size_group()])
        with pytest.raises(ProductUnavailableError):
            _pricer(product).price([LineItemRequest("1", 1, (OptionSelection("Colour", ("Red",)),))])

    def test_product_in_foreign_currency_rejected(self):
        product = make_product()
        product.price = Money.of("3.50", "USD")
        with pytest.raises(ValidationError, match="priced in USD"):
            _pricer(product).price([LineItemRequest("1", 1)])

    def test_totals_use_store_currency(self):
        product = make_product()
        product.price = Money.of("4.00", "EUR")
        pricer = OrderPricer(FakeProductRepository([product]), TAX_ON_TOP, currency="EUR")
        priced = pricer.price([LineItemRequest("1", 1)])
        assert priced.subtotal == Money.of("4.00", "EUR")
        assert priced.total.currency == "EUR"


class TestOptionValidation:

    def test_unknown_group(self):
        with pytest.raises(InvalidOptionError, match='Invalid option group "Milk"'):
            _pricer().price([_large(1, OptionSelection("Milk", ("Soy",)))])

    def test_unknown_value(self):
        request = LineItemRequest("1", 1, (OptionSelection("Size", ("Venti",)),))
        with pytest.raises(InvalidOptionError, match='Invalid option value "Venti"'):
            _pricer().price([request])

    def test_missing_required_group(self):
        with pytest.raises(MissingRequiredOptionError, match='Required option "Size" is missing'):
            _pricer().price([LineItemRequest("1", 1)])

    def test_required_group_with_empty_selection(self):
        request = LineItemRequest("1", 1, (OptionSelection("Size", ()),))
        with pytest.raises(MissingRequiredOptionError, match="at least one selection"):
            _pricer().price([request])

    def test_single_select_group_takes_one_value(self):
        request = LineItemRequest("1", 1, (OptionSelection("Size", ("Small", "Large")),))
        with pytest.raises(InvalidOptionError, match="single selection"):
            _pricer().price([request])

    def test_group_selected_twice_rejected(self):
        request = LineItemRequest(
            "1", 1, (OptionSelection("Size", ("Small",)), OptionSelection("Size", ("Large",)))
        )
        with pytest.raises(InvalidOptionError, match="more than once"):
            _pricer().price([request])

    def test_negative_item_price_rejected(self):
        product = make_product(price="3", groups=[extras_group()])
        request = LineItemRequest("1", 1, (OptionSelection("Extras", ("No Whip",)),))
        with pytest.raises(ValidationError, match="cannot be negative"):
            _pricer(product).price([request])

    def test_failure_in_later_item_reports_that_item(self):
        products = (make_product("1", groups=[size_group()]), make_product("2", "Mocha", stock=0))
        with pytest.raises(InsufficientStockError, match="Mocha"):
            _pricer(*products).price([_large(1), LineItemRequest("2", 1)])


class TestSettlePayment:

    def test_change_computed(self):
        cash, change = settle_payment(PaymentMethod.CASH, Money.of("256.80"), Money.of("300"))
        assert cash == Money.of("300")
        assert change == Money.of("43.20")

    def test_short_cash_rejected(self):
        with pytest.raises(InsufficientPaymentError, match="less than the total"):
            settle_payment(PaymentMethod.CASH, Money.of("256.80"), Money.of("200"))

    def test_missing_cash_rejected(self):
        with pytest.raises(InsufficientPaymentError):
            settle_payment(PaymentMethod.CASH, Money.of("10"))

    def test_exact_cash(self):
        _, change = settle_payment(PaymentMethod.CASH, Money.of("50"), Money.of("50"))
        assert change == Money.zero()

    def test_supplied_change_is_kept(self):
        _, change = settle_payment(
            PaymentMethod.CASH, Money.of("256.80"), Money.of("300"), Money.of("43")
        )
        assert change == Money.of("43")

    def test_qr_payment_records_no_cash(self):
        cash, change = settle_payment(PaymentMethod.QR_CODE, Money.of("80"), Money.of("100"))
        assert cash == Money.zero()
        assert change == Money.zero()
