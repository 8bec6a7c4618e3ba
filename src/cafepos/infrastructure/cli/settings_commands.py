"""CLI commands for store settings."""

from __future__ import annotations

import click

from cafepos.application.update_tax_settings import UpdateTaxSettingsHandler
from cafepos.domain.exceptions import DomainException
from cafepos.infrastructure.bootstrap import settings_repository


@click.command("show")
def settings_show() -> None:
    """Show the current store settings."""
    settings = settings_repository().get()
    mode = "included in price" if settings.tax_included_in_price else "added on top"
    click.echo(f"Store:    {settings.store_name}")
    click.echo(f"Currency: {settings.currency}")
    click.echo(f"Tax:      {settings.tax_rate}% ({mode})")


@click.command("tax")
@click.option("--rate", default=None, help="Tax rate in percent, e.g. 7.")
@click.option("--included/--excluded", "included", default=None, help="Whether prices already include tax.")
def settings_tax(rate: str | None, included: bool | None) -> None:
    """Change the tax rate or tax-inclusive pricing."""
    if rate is None and included is None:
        raise click.UsageError("Nothing to change: pass --rate and/or --included/--excluded")

    handler = UpdateTaxSettingsHandler(settings_repo=settings_repository())
    try:
        settings = handler.handle(tax_rate=rate, included_in_price=included)
    except DomainException as exc:
        raise click.ClickException(f"[{exc.code}] {exc}")

    mode = "included in price" if settings.tax_included_in_price else "added on top"
    click.echo(f"Tax set to {settings.tax_rate}% ({mode})")
