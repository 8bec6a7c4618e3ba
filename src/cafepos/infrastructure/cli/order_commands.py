"""CLI commands for the Order aggregate."""

from __future__ import annotations

from datetime import datetime

import click

from cafepos.application.create_order import CreateOrderHandler
from cafepos.application.dto import OptionSelectionSpec, OrderDTO, OrderItemSpec
from cafepos.application.list_orders import ListOrdersHandler
from cafepos.application.sales_report import SalesReportHandler
from cafepos.application.show_order import ShowOrderHandler
from cafepos.application.update_order_status import UpdateOrderStatusHandler
from cafepos.domain.exceptions import DomainException
from cafepos.domain.model.order import OrderStatus, OrderType, PaymentMethod
from cafepos.infrastructure.bootstrap import (
    clock,
    notification_publisher,
    order_repository,
    order_sequence,
    product_repository,
    settings_repository,
)


def _fail(exc: DomainException) -> click.ClickException:
    return click.ClickException(f"[{exc.code}] {exc}")


def _parse_options(raw: str) -> tuple[OptionSelectionSpec, ...]:
    """Parse 'Size=Large;Extras=Oat Milk|Extra Shot' into selections."""
    selections: list[OptionSelectionSpec] = []
    for part in raw.split(";"):
        part = part.strip()
        if not part:
            continue
        if "=" not in part:
            raise click.BadParameter(
                f"Invalid option format '{part}'. Expected 'Group=Value|Value'."
            )
        group, values = part.split("=", 1)
        names = tuple(v.strip() for v in values.split("|") if v.strip())
        selections.append(OptionSelectionSpec(group_name=group.strip(), values=names))
    return tuple(selections)


def _parse_item(raw: str) -> OrderItemSpec:
    """Parse 'PRODUCT_ID:QTY[:OPTIONS[:NOTES]]' into an OrderItemSpec."""
    parts = raw.split(":", 3)
    if len(parts) < 2:
        raise click.BadParameter(
            f"Invalid item format '{raw}'. Expected 'ProductID:Qty[:Options[:Notes]]'."
        )
    product_id, qty_str = parts[0].strip(), parts[1].strip()
    try:
        qty = int(qty_str)
    except ValueError:
        raise click.BadParameter(f"Invalid quantity '{qty_str}' for product '{product_id}'.")
    return OrderItemSpec(
        product_id=product_id,
        quantity=qty,
        selected_options=_parse_options(parts[2]) if len(parts) > 2 else (),
        customization_notes=parts[3].strip() if len(parts) > 3 else "",
    )


def _display_order(dto: OrderDTO) -> None:
    """Shared formatting for displaying an order."""
    click.echo(f"Order {dto.order_number}  (id={dto.id}, status={dto.status})")
    click.echo(f"Type:     {dto.order_type}" + (f"  table {dto.table_number}" if dto.table_number else ""))
    if dto.customer_name:
        click.echo(f"Customer: {dto.customer_name}")
    click.echo(f"Created:  {dto.created_at}")
    if dto.completed_at:
        click.echo(f"Done:     {dto.completed_at}")
    click.echo()
    click.echo(f"  {'Product':<24} {'Qty':>5} {'Price':>10} {'Total':>10}")
    click.echo(f"  {'-'*51}")
    for item in dto.items:
        click.echo(
            f"  {item.product_name:<24} {item.quantity:>5} {item.item_price:>10} {item.item_total:>10}"
        )
        for group in item.selected_options:
            chosen = ", ".join(name for name, _ in group.values)
            click.echo(f"    {group.group_name}: {chosen}")
        if item.customization_notes:
            click.echo(f"    note: {item.customization_notes}")
    click.echo(f"  {'-'*51}")
    click.echo(f"  {'Subtotal':<31} {dto.subtotal:>20}")
    click.echo(f"  {'Tax':<31} {dto.tax:>20}")
    click.echo(f"  {'Total (' + dto.currency + ')':<31} {dto.total:>20}")
    if dto.payment_method == PaymentMethod.CASH.value:
        click.echo(f"  {'Cash':<31} {dto.cash_received:>20}")
        click.echo(f"  {'Change':<31} {dto.change_given:>20}")
    else:
        click.echo(f"  {'Paid by':<31} {dto.payment_method:>20}")


@click.command("create")
@click.option(
    "--item", "items", multiple=True, required=True,
    help="Item as 'ProductID:Qty[:Group=Value|Value;Group=Value[:Notes]]'. Repeatable.",
)
@click.option(
    "--type", "order_type", required=True,
    type=click.Choice([t.value for t in OrderType]), help="Order type.",
)
@click.option(
    "--payment", "payment_method", required=True,
    type=click.Choice([m.value for m in PaymentMethod]), help="Payment method.",
)
@click.option("--cash", "cash_received", default=None, help="Cash received (Cash payments).")
@click.option("--change", "change_given", default=None, help="Change given, if not computed.")
@click.option("--customer", "customer_name", default="", help="Customer name.")
@click.option("--table", "table_number", default="", help="Table number.")
@click.option("--staff", "created_by", default=None, help="ID of the staff member taking the order.")
def order_create(
    items: tuple[str, ...],
    order_type: str,
    payment_method: str,
    cash_received: str | None,
    change_given: str | None,
    customer_name: str,
    table_number: str,
    created_by: str | None,
) -> None:
    """Create a new order."""
    specs = [_parse_item(raw) for raw in items]

    handler = CreateOrderHandler(
        order_repo=order_repository(),
        product_repo=product_repository(),
        settings_repo=settings_repository(),
        sequence=order_sequence(),
        publisher=notification_publisher(),
        clock=clock(),
    )

    try:
        dto = handler.handle(
            items=specs,
            order_type=order_type,
            payment_method=payment_method,
            customer_name=customer_name,
            table_number=table_number,
            cash_received=cash_received,
            change_given=change_given,
            created_by=created_by,
        )
    except DomainException as exc:
        raise _fail(exc)

    click.echo(f"Order {dto.order_number} created")
    _display_order(dto)


@click.command("show")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to display.")
def order_show(order_id: int) -> None:
    """Show details of an existing order."""
    handler = ShowOrderHandler(order_repo=order_repository())

    try:
        dto = handler.handle(order_id)
    except DomainException as exc:
        raise _fail(exc)

    _display_order(dto)


@click.command("status")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to update.")
@click.argument("status")
def order_status(order_id: int, status: str) -> None:
    """Move an order to STATUS (Pending, In Progress, Completed, Cancelled)."""
    handler = UpdateOrderStatusHandler(
        order_repo=order_repository(),
        product_repo=product_repository(),
        publisher=notification_publisher(),
        clock=clock(),
    )

    try:
        dto = handler.handle(order_id, status)
    except DomainException as exc:
        raise _fail(exc)

    click.echo(f"Order {dto.order_number} is now {dto.status}.")


@click.command("list")
@click.option("--status", default=None, type=click.Choice([s.value for s in OrderStatus]))
@click.option("--payment", "payment_method", default=None, type=click.Choice([m.value for m in PaymentMethod]))
@click.option("--from", "start_date", default=None, type=click.DateTime(["%Y-%m-%d"]), help="First day (YYYY-MM-DD).")
@click.option("--to", "end_date", default=None, type=click.DateTime(["%Y-%m-%d"]), help="Last day, inclusive.")
def order_list(
    status: str | None,
    payment_method: str | None,
    start_date: datetime | None,
    end_date: datetime | None,
) -> None:
    """List orders, newest first."""
    handler = ListOrdersHandler(order_repo=order_repository())
    try:
        orders = handler.handle(
            status=status,
            payment_method=payment_method,
            start_date=start_date.date() if start_date else None,
            end_date=end_date.date() if end_date else None,
        )
    except DomainException as exc:
        raise _fail(exc)

    if not orders:
        click.echo("No orders found.")
        return

    click.echo(f"{'ID':<5} {'Number':<18} {'Status':<12} {'Type':<10} {'Total':>10}")
    click.echo("-" * 59)
    for dto in orders:
        click.echo(
            f"{dto.id:<5} {dto.order_number:<18} {dto.status:<12} {dto.order_type:<10} {dto.total:>10}"
        )


@click.command("report")
@click.option("--from", "start_date", default=None, type=click.DateTime(["%Y-%m-%d"]), help="First day (YYYY-MM-DD).")
@click.option("--to", "end_date", default=None, type=click.DateTime(["%Y-%m-%d"]), help="Last day, inclusive.")
def order_report(start_date: datetime | None, end_date: datetime | None) -> None:
    """Sales report over completed orders."""
    handler = SalesReportHandler(order_repo=order_repository())
    report = handler.handle(
        start_date=start_date.date() if start_date else None,
        end_date=end_date.date() if end_date else None,
    )

    click.echo(f"Completed orders: {report.order_count}")
    click.echo(f"Revenue:          {report.total_revenue}")
    click.echo(f"Average order:    {report.average_order_value}")
    if report.top_products:
        click.echo()
        click.echo(f"  {'Product':<24} {'Qty':>6} {'Revenue':>12}")
        click.echo(f"  {'-'*44}")
        for p in report.top_products:
            click.echo(f"  {p.product_name:<24} {p.total_quantity:>6} {p.total_revenue:>12}")
