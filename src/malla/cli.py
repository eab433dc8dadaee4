# cli.py
from __future__ import annotations

import sys
from collections import Counter
from pathlib import Path

import click
from sqlalchemy.exc import SQLAlchemyError

from malla import settings
from malla.dag import diagnose
from malla.dsl import CatalogError, load_catalog
from malla.engine import PrerequisiteEngine
from malla.model import Catalog, Status, UnknownItemError
from malla.store import GraphStateStore
from malla.ui.console import Console, set_console, get_console


DEFAULT_CATALOG_FILES = ("catalog.json", "malla_catalog.py")


def find_catalog_files() -> list[Path]:
    """Catalog files in the current directory, by their conventional names."""
    current_dir = Path(".")
    return [current_dir / name for name in DEFAULT_CATALOG_FILES if (current_dir / name).exists()]


def discover_catalog(catalog_arg: str | None) -> Path:
    """
    Resolve the catalog file from argument, environment or default names.

    Raises:
        SystemExit: If no catalog can be found or several candidates exist
    """
    console = get_console()

    if catalog_arg:
        catalog_path = Path(catalog_arg)
        if not catalog_path.exists():
            console.print_error(
                "Catalog file not found",
                f"Could not find catalog file: {catalog_arg}",
                suggestion="Specify a different path:\n  malla --catalog catalog.json status",
            )
            sys.exit(1)
        return catalog_path

    candidates = find_catalog_files()

    if len(candidates) == 0:
        console.print_error(
            "No catalog file found",
            "Could not find a catalog file.",
            details=["Looked for:", *(f"  {name}" for name in DEFAULT_CATALOG_FILES)],
            suggestion="Create catalog.json, set MALLA_CATALOG, or pass --catalog.",
        )
        sys.exit(1)

    if len(candidates) > 1:
        console.print_error(
            "Multiple catalog files found",
            "Found several catalog files. Please specify which one to use:",
            details=[f"  {c}" for c in candidates],
            suggestion="Specify one explicitly:\n  malla --catalog catalog.json status",
        )
        sys.exit(1)

    return candidates[0]


def _load_catalog_or_exit(ctx: click.Context) -> Catalog:
    console = get_console()
    catalog_path = discover_catalog(ctx.obj["catalog"])
    try:
        catalog = load_catalog(catalog_path)
    except (CatalogError, FileNotFoundError) as e:
        console.print_error(
            "Failed to load catalog",
            f"Could not load catalog from {catalog_path}",
            details=[str(e)],
        )
        sys.exit(1)
    except Exception as e:
        # errors raised by a .py catalog module itself
        console.print_error("Failed to load catalog", f"{catalog_path} raised {type(e).__name__}")
        console.print_exception(e)
        sys.exit(1)
    console.print_debug(f"Loaded {len(catalog)} item(s) from {catalog_path}")
    return catalog


def _open_engine(ctx: click.Context) -> PrerequisiteEngine:
    catalog = _load_catalog_or_exit(ctx)
    try:
        kv = settings.make_kv_store(
            ctx.obj["backend"],
            state_path=ctx.obj["state"],
            database_url=ctx.obj["database_url"],
        )
    except (ValueError, SQLAlchemyError) as e:
        get_console().print_error("Invalid state backend", str(e))
        sys.exit(1)
    return PrerequisiteEngine(catalog, GraphStateStore(kv, key=ctx.obj["key"]))


def _print_statuses(engine: PrerequisiteEngine, by_level: bool = False) -> None:
    console = get_console()
    statuses = engine.statuses()

    if by_level:
        report = diagnose(engine.catalog)
        groups = [(f"Level {i + 1}", ids) for i, ids in enumerate(report.levels)]
        if report.cycle_members:
            groups.append(("Unreachable (cycle)", report.cycle_members))
    else:
        groups = [("Items", engine.catalog.ids)]

    for title, ids in groups:
        console.print_header(title)
        for item_id in ids:
            item = engine.catalog[item_id]
            console.print_item(item.id, item.display_name, statuses[item.id].value)

    counts = Counter(s.value for s in statuses.values())
    console.print_summary({s.value: counts.get(s.value, 0) for s in Status})


@click.group()
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Enable debug mode (show stack traces and detailed output)",
)
@click.option(
    "--catalog",
    default=settings.CATALOG_PATH,
    help="Catalog file (.json or .py); defaults to catalog.json / malla_catalog.py if present",
)
@click.option("--backend", type=click.Choice(settings.BACKENDS), default=settings.BACKEND, show_default=True, help="State backend")
@click.option("--state", default=settings.STATE_PATH, show_default=True, help="State file for the file backend")
@click.option("--database-url", default=settings.DATABASE_URL, show_default=True, help="Database URL for the sqlite backend")
@click.option("--key", default=settings.STATE_KEY, show_default=True, help="Key the completed set is stored under")
@click.pass_context
def cli(ctx, debug, catalog, backend, state, database_url, key):
    """malla: track completed items in a prerequisite graph."""
    console = Console(debug=debug)
    set_console(console)
    ctx.ensure_object(dict)
    ctx.obj.update(
        debug=debug,
        catalog=catalog,
        backend=backend,
        state=state,
        database_url=database_url,
        key=key,
    )


@cli.command()
@click.option("--level/--no-level", default=False, help="Group items by prerequisite depth")
@click.pass_context
def status(ctx, level):
    """Show every item with its current status."""
    engine = _open_engine(ctx)
    try:
        _print_statuses(engine, by_level=level)
    except Exception as e:
        get_console().print_exception(e)
        sys.exit(1)


@cli.command()
@click.argument("item_ids", nargs=-1, required=True)
@click.pass_context
def toggle(ctx, item_ids):
    """Mark items complete, or incomplete if they already are."""
    console = get_console()
    engine = _open_engine(ctx)

    rejected = False
    for item_id in item_ids:
        try:
            result = engine.toggle(item_id)
        except UnknownItemError as e:
            console.print_error(
                "Unknown item",
                str(e),
                suggestion="Run `malla status` to list known item ids.",
            )
            sys.exit(2)
        except Exception as e:
            console.print_exception(e)
            sys.exit(1)

        if result.accepted:
            console.print_toggled(item_id, result.action)
        else:
            console.print_info(f"{item_id}: LOCKED")
            console.print_info(result.message)
            rejected = True

    if rejected:
        sys.exit(1)


@cli.command()
@click.pass_context
def check(ctx):
    """Report unknown requirements and cycles in the catalog."""
    console = get_console()
    catalog = _load_catalog_or_exit(ctx)
    report = diagnose(catalog)

    console.print_header("Catalog check")
    console.print_info(f"Items: {len(catalog)}")
    console.print_info(f"Levels: {len(report.levels)}")

    for item_id, unknown in report.unknown_requirements.items():
        console.print_info(f"  {item_id} requires unknown item(s): {', '.join(unknown)} (always locked)")

    if report.cycle_members:
        console.print_error(
            "Requirement cycle",
            "These items can never become available:",
            details=report.cycle_members,
        )
        sys.exit(1)

    if report.ok:
        console.print_info("OK")


@cli.command()
@click.confirmation_option(prompt="Clear all completed items?")
@click.pass_context
def reset(ctx):
    """Clear the completed set."""
    engine = _open_engine(ctx)
    try:
        engine.reset()
    except Exception as e:
        get_console().print_exception(e)
        sys.exit(1)
    get_console().print_info("Completed set cleared.")


def main() -> None:
    try:
        cli()
    except KeyboardInterrupt:
        get_console().print_info("\nInterrupted by user")
        sys.exit(130)
    except Exception as e:
        get_console().print_exception(e)
        sys.exit(1)


if __name__ == "__main__":
    main()
