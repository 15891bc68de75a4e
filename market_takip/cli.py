"""Command-line interface for managing the inventory."""

import asyncio
import sys
from pathlib import Path

import click

from . import __version__
from .models.product import Category
from .services.expiry import ExpiryStatus
from .services.inventory_service import InventoryService
from .services.query import ALL_CATEGORIES, SortOption
from .services.scanner import ProductDraft
from .utils.config import get_config
from .utils.exceptions import (
    BaseAppException,
    ConfigurationError,
    DataImportError,
    ImageError,
    RepositoryError,
    StorageError,
)

STATUS_COLORS = {
    ExpiryStatus.EXPIRED: "red",
    ExpiryStatus.CRITICAL: "red",
    ExpiryStatus.WARNING: "yellow",
    ExpiryStatus.OK: "green",
}


def _load_service() -> InventoryService:
    try:
        service = InventoryService()
    except ConfigurationError as e:
        click.echo(click.style(f"✗ Configuration error: {e.message}", fg="red"), err=True)
        sys.exit(1)
    service.initialize()
    return service


@click.group()
@click.version_option(version=__version__)
def cli():
    """
    MarketTakip inventory CLI.

    Track perishable products and their expiry dates.
    """
    pass


@cli.command("list")
@click.option("--search", "-s", default="", help="Match name (case-insensitive) or barcode")
@click.option(
    "--category", "-c",
    type=click.Choice([ALL_CATEGORIES] + [c.value for c in Category]),
    default=ALL_CATEGORIES,
    help="Only show one category"
)
@click.option(
    "--sort",
    type=click.Choice([o.value for o in SortOption]),
    default=SortOption.EXPIRY_ASC.value,
    show_default=True,
    help="Sort order"
)
def list_products(search: str, category: str, sort: str):
    """List products, filtered and sorted."""
    service = _load_service()
    products = service.list_products(search, category, sort)

    if not products:
        click.echo("No products found.")
        return

    for product in products:
        click.echo(
            f"{product.expiry_date.isoformat()}  {product.quantity:>4}  "
            f"{product.name}  [{product.category.value}]  {product.barcode}  ({product.id})"
        )
    click.echo(f"\n{len(products)} product(s)")


@cli.command()
@click.option("--name", required=True, help="Product name")
@click.option("--barcode", required=True, help="Barcode text")
@click.option(
    "--category",
    type=click.Choice([c.value for c in Category]),
    default=Category.OTHER.value,
    show_default=True
)
@click.option("--expiry", required=True, type=click.DateTime(formats=["%Y-%m-%d"]), help="Expiry date (YYYY-MM-DD)")
@click.option("--quantity", default=1, show_default=True, type=click.IntRange(min=1))
@click.option("--photo", type=click.Path(exists=True, dir_okay=False, path_type=Path), help="Product photo")
def add(name: str, barcode: str, category: str, expiry, quantity: int, photo: Path):
    """Add a product."""
    service = _load_service()
    draft = ProductDraft(
        name=name,
        barcode=barcode,
        category=Category(category),
        quantity=quantity,
        expiry_date=expiry.date()
    )

    try:
        if photo:
            asyncio.run(draft.attach_photo(photo.read_bytes(), service.preprocessor))
        product = service.add_product(draft)
    except (ValueError, ImageError, RepositoryError) as e:
        message = e.message if isinstance(e, BaseAppException) else str(e)
        click.echo(click.style(f"✗ {message}", fg="red"), err=True)
        sys.exit(1)
    except StorageError as e:
        click.echo(click.style(f"✗ Could not save: {e.message}", fg="red"), err=True)
        click.echo("  Storage may be full. Delete some products or use smaller photos.", err=True)
        sys.exit(1)

    click.echo(click.style(f"✓ Added {product.name} ({product.id})", fg="green"))


@cli.command()
@click.argument("product_id")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
def delete(product_id: str, yes: bool):
    """Delete a product by id."""
    service = _load_service()
    product = service.get_product(product_id)
    if product is None:
        click.echo(click.style(f"⚠ No product with id {product_id}", fg="yellow"))
        return

    if not yes and not click.confirm(f"Delete {product.name}?"):
        click.echo("Cancelled.")
        return

    try:
        service.delete_product(product_id)
    except StorageError as e:
        click.echo(click.style(f"✗ Could not save: {e.message}", fg="red"), err=True)
        sys.exit(1)

    click.echo(click.style(f"✓ Deleted {product.name}", fg="green"))


@cli.command()
def stats():
    """Show inventory statistics."""
    service = _load_service()
    summary = service.stats()

    click.echo("Inventory Statistics:")
    click.echo("=" * 60)
    click.echo(f"Total products:  {summary.total_products}")
    click.echo(f"Total quantity:  {summary.total_quantity}")
    click.echo(click.style(f"Expired:         {summary.expired_count}", fg="red" if summary.expired_count else None))
    click.echo(click.style(f"Critical (3d):   {summary.critical_count}", fg="red" if summary.critical_count else None))
    click.echo(click.style(f"Warning (7d):    {summary.warning_count}", fg="yellow" if summary.warning_count else None))

    categories = service.dashboard()["categories"]
    if categories:
        click.echo()
        click.echo("By category:")
        for label, count in categories.items():
            click.echo(f"  {label:<22} {count}")


@cli.command()
def alerts():
    """Show products expiring within the alert window."""
    service = _load_service()
    items = service.notifications()

    if not items:
        click.echo(click.style("✓ Nothing expires in the coming days.", fg="green"))
        return

    for alert in items:
        color = STATUS_COLORS[alert.status]
        click.echo(click.style(f"{alert.product.name:<30} {alert.message}", fg=color))


@cli.command("export")
@click.option(
    "--output", "-o",
    type=click.Path(file_okay=False, path_type=Path),
    default=Path("."),
    help="Directory for the backup file"
)
def export_backup(output: Path):
    """Write a dated JSON backup of all products."""
    service = _load_service()
    document = service.export_backup()

    output.mkdir(parents=True, exist_ok=True)
    target = output / document.filename
    target.write_bytes(document.content)
    click.echo(click.style(f"✓ Backup written to {target}", fg="green"))


@cli.command("import")
@click.argument("backup", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def import_backup(backup: Path):
    """Replace all products with the contents of a backup file."""
    service = _load_service()

    try:
        products = service.import_backup(backup.read_bytes())
    except (DataImportError, RepositoryError) as e:
        click.echo(click.style(f"✗ Invalid backup file: {e.message}", fg="red"), err=True)
        sys.exit(1)
    except StorageError as e:
        click.echo(click.style(f"✗ Could not save: {e.message}", fg="red"), err=True)
        sys.exit(1)

    click.echo(click.style(f"✓ Imported {len(products)} products", fg="green"))


@cli.command()
def config_info():
    """Display current configuration settings."""
    try:
        config = get_config()
    except ConfigurationError as e:
        click.echo(click.style(f"✗ Error loading config: {e.message}", fg="red"), err=True)
        sys.exit(1)

    click.echo("Configuration Settings:")
    click.echo("=" * 60)
    click.echo()

    click.echo("Environment:")
    click.echo(f"  Environment:     {config.env.environment}")
    click.echo(f"  Log level:       {config.logging.level}")
    click.echo()

    click.echo("Storage:")
    click.echo(f"  Directory:       {config.storage.directory}")
    click.echo(f"  Key:             {config.storage.key}")
    click.echo(f"  Quota:           {config.storage.quota_bytes / 1024:.0f} KB")
    click.echo()

    click.echo("Images:")
    click.echo(f"  Max width:       {config.images.max_width}px")
    click.echo(f"  JPEG quality:    {config.images.jpeg_quality}")
    click.echo()


@cli.command()
@click.option("--host", default=None, help="Bind host (defaults to config)")
@click.option("--port", default=None, type=int, help="Bind port (defaults to config)")
def serve(host: str, port: int):
    """Run the HTTP API."""
    import uvicorn

    from .api_server import create_app

    settings = get_config().env
    uvicorn.run(create_app(), host=host or settings.host, port=port or settings.port)


if __name__ == "__main__":
    cli()
