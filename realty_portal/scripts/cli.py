"""
``realty-admin``: operator command line.

Every command works on the database named by ``--database-url`` (default:
``DATABASE_URL``). Run ``realty-admin --help`` for the list of commands.
"""

from __future__ import annotations

import asyncio
import json
import os
from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncIterator, Optional

import click
from dotenv import load_dotenv
from sqlalchemy.ext.asyncio import AsyncSession

from realty_portal.auth.security import generate_temporary_password, hash_password
from realty_portal.core.database.utils import create_all, create_engine, create_sessionmaker
from realty_portal.core.database.repositories import UserRepository
from realty_portal.core.logging_config import get_logger, setup_logging
from realty_portal.core.models.domain.enums import UserRole

from .maintenance import DEFAULT_IMAGE_HOST, cleanup_activities, delete_external_image_blogs, export_listings
from .storage import analyze_storage
from .sync import ACTIVITY_LIMIT, sync_databases

logger = get_logger(__name__)

REQUIRED_VARIABLES = ("DATABASE_URL", "SESSION_SECRET")
CLOUDINARY_VARIABLES = ("CLOUDINARY_CLOUD_NAME", "CLOUDINARY_API_KEY", "CLOUDINARY_API_SECRET")
OPTIONAL_VARIABLES = CLOUDINARY_VARIABLES + (
    "EMAILJS_SERVICE_ID",
    "EMAILJS_TEMPLATE_ID",
    "EMAILJS_PUBLIC_KEY",
    "EMAILJS_PRIVATE_KEY",
    "CONTACT_TO_EMAIL",
    "RECAPTCHA_SECRET_KEY",
    "LOGFIRE_TOKEN",
)
SECRET_VARIABLES = {"DATABASE_URL", "SESSION_SECRET", "CLOUDINARY_API_SECRET", "EMAILJS_PRIVATE_KEY", "RECAPTCHA_SECRET_KEY", "LOGFIRE_TOKEN"}

SEED_USERS = (
    ("admin", "Admin User", UserRole.ADMIN),
    ("agent", "Sample Agent", UserRole.AGENT),
    ("writer", "Sample Writer", UserRole.WRITER),
)


@asynccontextmanager
async def open_session(url: str, create_schema: bool = False) -> AsyncIterator[AsyncSession]:
    engine = create_engine(url)
    try:
        if create_schema:
            await create_all(engine)
        async with create_sessionmaker(engine)() as session:
            yield session
    finally:
        await engine.dispose()


def _mask(name: str, value: str) -> str:
    if name not in SECRET_VARIABLES:
        return value
    return value[:4] + "****" if len(value) > 8 else "****"


def _format_bytes(size: float) -> str:
    for unit in ("B", "KB", "MB", "GB"):
        if size < 1024 or unit == "GB":
            return f"{size:.2f} {unit}" if unit != "B" else f"{int(size)} B"
        size /= 1024
    return f"{size:.2f} GB"


@click.group()
@click.option(
    "--database-url",
    envvar="DATABASE_URL",
    default="sqlite+aiosqlite:///./realty_portal.db",
    show_default=True,
    help="Database to operate on.",
)
@click.option("--log-level", default="WARNING", show_default=True, help="Log level for diagnostic output.")
@click.pass_context
def cli(ctx: click.Context, database_url: str, log_level: str) -> None:
    """Maintenance commands for the Realty Portal database."""
    setup_logging(log_level=log_level, log_format="simple", enable_file=False)
    ctx.ensure_object(dict)
    ctx.obj["database_url"] = database_url


@cli.command("check-env")
def check_env() -> None:
    """Report required and optional environment variables."""
    problems = 0
    click.secho("Required:", bold=True)
    for name in REQUIRED_VARIABLES:
        value = os.environ.get(name)
        if value:
            click.echo(f"  [ok]      {name} = {_mask(name, value)}")
        else:
            click.secho(f"  [missing] {name}", fg="red")
            problems += 1

    click.secho("Optional:", bold=True)
    for name in OPTIONAL_VARIABLES:
        value = os.environ.get(name)
        click.echo(f"  [{'set' if value else 'unset'}]{' ' * (6 if value else 4)}{name}")

    configured = [name for name in CLOUDINARY_VARIABLES if os.environ.get(name)]
    if configured and len(configured) != len(CLOUDINARY_VARIABLES):
        missing = ", ".join(name for name in CLOUDINARY_VARIABLES if name not in configured)
        click.secho(f"Cloudinary is partially configured; missing {missing}", fg="red")
        problems += 1
    elif not configured:
        click.echo("Cloudinary not configured; uploads are stored on local disk.")

    if problems:
        raise click.ClickException(f"{problems} environment problem(s) found")
    click.secho("Environment looks good.", fg="green")


@cli.command("seed")
@click.option("--email-domain", default="realty-portal.local", show_default=True)
@click.option("--create-schema/--no-create-schema", default=False, help="Create missing tables first.")
@click.pass_context
def seed(ctx: click.Context, email_domain: str, create_schema: bool) -> None:
    """Create (or refresh) the default admin, agent and writer accounts."""

    async def run() -> None:
        async with open_session(ctx.obj["database_url"], create_schema) as session:
            repository = UserRepository(session)
            for prefix, name, role in SEED_USERS:
                password = generate_temporary_password()
                user, created = await repository.upsert_by_email(
                    email=f"{prefix}@{email_domain}",
                    name=name,
                    role=role.value,
                    password_hash=hash_password(password),
                )
                if created:
                    click.echo(f"Created {role.value:<6} {user.email}  password: {password}")
                else:
                    click.echo(f"Updated {role.value:<6} {user.email}  (password unchanged)")

    asyncio.run(run())
    click.secho("Change the generated passwords after the first sign-in.", fg="yellow")


@cli.command("analyze-storage")
@click.pass_context
def analyze_storage_command(ctx: click.Context) -> None:
    """Show row counts, table sizes and the largest content."""

    async def run():
        async with open_session(ctx.obj["database_url"]) as session:
            return await analyze_storage(session)

    report = asyncio.run(run())

    click.secho("Rows per table:", bold=True)
    for table, count in report["row_counts"].items():
        click.echo(f"  {table:<12} {count:>8}")

    if report["table_sizes"]:
        click.secho("Table sizes:", bold=True)
        for table, sizes in report["table_sizes"].items():
            click.echo(
                f"  {table:<12} total {_format_bytes(sizes['total'])}"
                f" (data {_format_bytes(sizes['data'])}, indexes {_format_bytes(sizes['indexes'])})"
            )

    activities = report["activities"]
    total = report["row_counts"]["activities"]
    click.secho("Activities by action:", bold=True)
    for action, count in activities["by_action"].items():
        click.echo(f"  {action:<10} {count:>6} ({count * 100 / total:.1f}%)")
    click.secho("Activities by item type:", bold=True)
    for item_type, count in activities["by_item_type"].items():
        click.echo(f"  {item_type:<10} {count:>6} ({count * 100 / total:.1f}%)")
    if activities["oldest"]:
        click.echo(f"  oldest {activities['oldest']}, newest {activities['newest']}")

    for label, key in (("Largest blog posts:", "largest_blog_posts"), ("Largest listings:", "largest_listings")):
        if report[key]:
            click.secho(label, bold=True)
            for item in report[key]:
                click.echo(f"  {_format_bytes(item['size']):>10}  {item['title']}")


@cli.command("cleanup-activities")
@click.option("--days", default=30, show_default=True, help="Delete activities older than this many days.")
@click.option("--keep", default=100, show_default=True, help="Always keep this many most recent activities.")
@click.option("--action", default=None, help="Only delete this action (e.g. LOGIN).")
@click.option("--item-type", default=None, help="Only delete this item type (e.g. AUTH).")
@click.option("--dry-run", is_flag=True, help="Report what would be deleted without deleting.")
@click.pass_context
def cleanup_activities_command(
    ctx: click.Context, days: int, keep: int, action: Optional[str], item_type: Optional[str], dry_run: bool
) -> None:
    """Prune old activity log entries."""

    async def run():
        async with open_session(ctx.obj["database_url"]) as session:
            return await cleanup_activities(
                session,
                days=days,
                keep=keep,
                action=action.upper() if action else None,
                item_type=item_type.upper() if item_type else None,
                dry_run=dry_run,
            )

    result = asyncio.run(run())
    if not result.matched:
        click.echo("No activities to delete.")
        return

    click.echo(f"Activities older than {days} days (keeping the {keep} newest): {result.matched}")
    for key, count in result.breakdown.items():
        click.echo(f"  {key:<20} {count:>6}")
    click.echo(f"Estimated space freed: {_format_bytes(result.estimated_bytes)}")
    if result.dry_run:
        click.secho("Dry run: nothing deleted.", fg="yellow")
    else:
        click.secho(f"Deleted {result.deleted} activities.", fg="green")


@cli.command("sync")
@click.option("--source-url", default=None, help="Source database (default: --database-url).")
@click.option("--target-url", envvar="PRODUCTION_DATABASE_URL", required=True, help="Target database.")
@click.option("--activity-limit", default=ACTIVITY_LIMIT, show_default=True, help="Most recent activities to copy.")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation.")
@click.pass_context
def sync_command(
    ctx: click.Context, source_url: Optional[str], target_url: str, activity_limit: int, yes: bool
) -> None:
    """Upsert users, listings, blog posts and recent activities into another database."""
    source_url = source_url or ctx.obj["database_url"]
    if source_url == target_url:
        raise click.BadParameter("source and target are the same database", param_hint="--target-url")
    if not yes:
        click.confirm("Existing rows on the target will be updated. Continue?", abort=True)

    async def run():
        async with open_session(source_url) as source, open_session(target_url) as target:
            return await sync_databases(source, target, activity_limit)

    report = asyncio.run(run())
    for table, counts in report.as_dict().items():
        skipped = f" ({counts['skipped']} skipped)" if counts["skipped"] else ""
        click.echo(f"  {table:<12} {counts['synced']:>6} synced{skipped}")
    click.secho("Sync complete.", fg="green")


@cli.command("export-listings")
@click.option("--output", "-o", type=click.Path(dir_okay=False, writable=True), default=None)
@click.pass_context
def export_listings_command(ctx: click.Context, output: Optional[str]) -> None:
    """Write every listing, with its author, to a JSON file."""

    async def run():
        async with open_session(ctx.obj["database_url"]) as session:
            return await export_listings(session)

    listings = asyncio.run(run())
    output = output or f"listings-export-{datetime.now().strftime('%Y%m%d-%H%M%S')}.json"
    with open(output, "w", encoding="utf-8") as handle:
        json.dump({"exported_at": datetime.now().isoformat(), "count": len(listings), "listings": listings}, handle, indent=2)
    click.echo(f"Exported {len(listings)} listings to {output}")


@cli.command("delete-external-image-blogs")
@click.option("--host", default=DEFAULT_IMAGE_HOST, show_default=True, help="Image host to look for.")
@click.option("--dry-run", is_flag=True, help="List matching posts without deleting.")
@click.pass_context
def delete_external_image_blogs_command(ctx: click.Context, host: str, dry_run: bool) -> None:
    """Delete blog posts whose images are hosted on ``--host``."""

    async def run():
        async with open_session(ctx.obj["database_url"]) as session:
            return await delete_external_image_blogs(session, host, dry_run)

    posts = asyncio.run(run())
    if not posts:
        click.echo(f"No blog posts reference {host}.")
        return
    for post in posts:
        click.echo(f"  {post.id}  {post.title}")
    verb = "Would delete" if dry_run else "Deleted"
    click.echo(f"{verb} {len(posts)} blog post(s) referencing {host}.")


def main() -> None:
    load_dotenv()
    cli(obj={})


if __name__ == "__main__":
    main()
