"""invtrack command-line entry point."""

from __future__ import annotations

from pathlib import Path

import click

from invtrack.infrastructure.cli.count_commands import count_finish, count_record, count_start
from invtrack.infrastructure.cli.lot_commands import (
    lot_add,
    lot_expiring,
    lot_release,
    lot_reserve,
)
from invtrack.infrastructure.cli.po_commands import (
    po_cancel,
    po_confirm,
    po_create,
    po_delete,
    po_receive,
    po_send,
    po_show,
)
from invtrack.infrastructure.cli.product_commands import (
    movement_record,
    product_add,
    product_list,
    product_stock,
)
from invtrack.infrastructure.cli.report_commands import (
    report_category,
    report_movement,
    report_valuation,
)
from invtrack.infrastructure.cli.transfer_commands import (
    transfer_cancel,
    transfer_create,
    transfer_receive,
    transfer_ship,
    transfer_show,
)
from invtrack.infrastructure.config import Settings
from invtrack.infrastructure.logging_config import configure_logging


@click.group()
@click.option(
    "--data-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory holding the JSON data files.",
)
@click.option("--log-level", default=None, help="DEBUG, INFO, WARNING or ERROR.")
@click.pass_context
def cli(ctx: click.Context, data_dir: Path | None, log_level: str | None) -> None:
    """invtrack: stock movements, purchase orders, transfers and counts."""
    try:
        settings = Settings.from_env().with_overrides(data_dir=data_dir, log_level=log_level)
        configure_logging(settings.log_level, settings.log_format)
    except ValueError as exc:
        raise click.ClickException(str(exc))
    ctx.obj = settings


@cli.group()
def product() -> None:
    """Manage products and their stock."""


@cli.group()
def movement() -> None:
    """Record manual stock movements."""


@cli.group()
def po() -> None:
    """Manage purchase orders."""


@cli.group()
def transfer() -> None:
    """Move stock between warehouses."""


@cli.group()
def count() -> None:
    """Run physical stock counts."""


@cli.group()
def lot() -> None:
    """Manage lots and reservations."""


@cli.group()
def report() -> None:
    """Stock reports."""


# Register subcommands
product.add_command(product_add)
product.add_command(product_list)
product.add_command(product_stock)
movement.add_command(movement_record)
po.add_command(po_create)
po.add_command(po_send)
po.add_command(po_confirm)
po.add_command(po_receive)
po.add_command(po_cancel)
po.add_command(po_delete)
po.add_command(po_show)
transfer.add_command(transfer_create)
transfer.add_command(transfer_ship)
transfer.add_command(transfer_receive)
transfer.add_command(transfer_cancel)
transfer.add_command(transfer_show)
count.add_command(count_start)
count.add_command(count_record)
count.add_command(count_finish)
lot.add_command(lot_add)
lot.add_command(lot_reserve)
lot.add_command(lot_release)
lot.add_command(lot_expiring)
report.add_command(report_movement)
report.add_command(report_valuation)
report.add_command(report_category)
