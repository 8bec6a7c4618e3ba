"""CLI commands for the Product aggregate."""

from __future__ import annotations

import click

from cafepos.application.set_stock import SetStockHandler
from cafepos.domain.exceptions import DomainException
from cafepos.infrastructure.bootstrap import notification_publisher, product_repository


@click.command("list")
def product_list() -> None:
    """List all products in the catalog."""
    repo = product_repository()
    products = repo.list_all()

    if not products:
        click.echo("No products found.")
        return

    click.echo(f"{'ID':<6} {'Name':<20} {'Price':>10} {'Stock':>7}  Flags")
    click.echo("-" * 56)
    for p in products:
        flags = []
        if not p.is_available:
            flags.append("unavailable")
        if p.is_low_stock:
            flags.append("low stock")
        click.echo(
            f"{p.id:<6} {p.name:<20} {p.price.amount:>10.2f} {p.stock_count:>7}  {', '.join(flags)}"
        )


@click.command("stock")
@click.option("--id", "product_id", required=True, help="Product ID.")
@click.option("--count", "stock_count", required=True, type=int, help="Units now in stock.")
def product_stock(product_id: str, stock_count: int) -> None:
    """Set the stock count for a product."""
    handler = SetStockHandler(
        product_repo=product_repository(),
        publisher=notification_publisher(),
    )

    try:
        product = handler.handle(product_id=product_id, stock_count=stock_count)
    except DomainException as exc:
        raise click.ClickException(f"[{exc.code}] {exc}")

    click.echo(f"Stock for '{product.name}' set to {product.stock_count}")
