import click

from cafepos.infrastructure.cli.order_commands import (
    order_create,
    order_list,
    order_report,
    order_show,
    order_status,
)
from cafepos.infrastructure.cli.product_commands import product_list, product_stock
from cafepos.infrastructure.cli.settings_commands import settings_show, settings_tax
from cafepos.infrastructure.config import load_config
from cafepos.infrastructure.logging import configure_logging


@click.group()
def cli() -> None:
    """Café POS — orders, kitchen queue and stock"""
    config = load_config()
    configure_logging(config.log_level, json=config.log_json)


@cli.group()
def order() -> None:
    """Manage orders."""


@cli.group()
def product() -> None:
    """Manage products."""


@cli.group()
def settings() -> None:
    """Manage store settings."""


# Register subcommands
order.add_command(order_create)
order.add_command(order_list)
order.add_command(order_report)
order.add_command(order_show)
order.add_command(order_status)
product.add_command(product_list)
product.add_command(product_stock)
settings.add_command(settings_show)
settings.add_command(settings_tax)
