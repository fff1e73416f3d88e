"""CLI for schema inspection, DDL generation and database profiles.

Usage:
    DB_PROFILE=dev schema-db connect --schema app.db:db_schema
    schema-db status
    schema-db profiles
    schema-db validate
    schema-db inspect --schema app/db.py
    schema-db generate --schema app.db:db_schema --dialect sqlite --exclude-auth

Commands:
    connect   - Connect to database and validate schema
    status    - Show current connection status
    profiles  - List available profiles
    validate  - Re-validate current profile schema
    inspect   - Show models, fields and relations of a schema
    generate  - Write CREATE TABLE statements for a schema
"""

import argparse
import asyncio
import sys
from pathlib import Path

from rich.console import Console
from rich.table import Table

from schema_db.cli.loader import SchemaLoadError, load_schema
from schema_db.config.loader import load_db_config
from schema_db.factory import connect_and_validate, read_profile_lock
from schema_db.schema.ddl import DIALECTS, generate_ddl
from schema_db.schema.filter import DEFAULT_AUTH_MODELS
from schema_db.schema.models import SchemaDefinition
from schema_db.schema.relations import get_relations

console = Console()


# ============================================================================
# Schema resolution (CLI-internal helper)
# ============================================================================


def _resolve_schema(args: argparse.Namespace) -> SchemaDefinition | None:
    """Schema from ``--schema``, else from ``[schema] target`` in db.toml.

    Returns ``None`` when neither is configured.

    Raises:
        SchemaLoadError: If the target cannot be loaded.
    """
    target = getattr(args, "schema", None)
    if not target:
        try:
            target = load_db_config().schema_target
        except (FileNotFoundError, ValueError):
            target = None
    if not target:
        return None
    return load_schema(target)


def _split_names(value: str | None) -> list[str]:
    if not value:
        return []
    return [name.strip() for name in value.split(",") if name.strip()]


# ============================================================================
# Async command implementations
# ============================================================================


async def _async_connect(args: argparse.Namespace) -> int:
    """Async implementation for connect command.

    Returns:
        0 on success, 1 on failure.
    """
    env_prefix = getattr(args, "env_prefix", "")

    try:
        schema = _resolve_schema(args)
    except SchemaLoadError as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1

    previous_profile = read_profile_lock()

    console.print("Connecting to database...", style="dim")

    result = await connect_and_validate(schema, env_prefix=env_prefix)

    if result.success:
        console.print()
        console.print(
            f"[bold green]v[/bold green] Connected to profile: "
            f"[bold cyan]{result.profile_name}[/bold cyan] ({result.provider})"
        )
        if result.schema_valid is None:
            console.print("  Schema validation: [dim]skipped[/dim]")
        else:
            console.print("  Schema validation: [green]PASSED[/green]")
        if result.schema_report and result.schema_report.extra_tables:
            console.print(
                f"  Extra tables: [yellow]"
                f"{', '.join(result.schema_report.extra_tables)}[/yellow]"
            )

        if previous_profile and previous_profile != result.profile_name:
            console.print(
                f"\n[dim]Switched from[/dim] [bold]{previous_profile}[/bold] "
                f"[dim]to[/dim] [bold cyan]{result.profile_name}[/bold cyan]"
            )
        return 0

    console.print()
    console.print(f"[bold red]x[/bold red] {result.error}")
    if result.schema_report:
        console.print("\n[bold]Schema validation report:[/bold]")
        console.print(result.schema_report.format_report(), markup=False)
    return 1


async def _async_validate(args: argparse.Namespace) -> int:
    """Async implementation for validate command.

    Returns:
        0 on valid schema, 1 on invalid schema, missing schema or no profile.
    """
    env_prefix = getattr(args, "env_prefix", "")

    profile = read_profile_lock()
    if not profile:
        console.print("[yellow]No validated profile.[/yellow]")
        console.print(
            "[dim]Run[/dim] [cyan]schema-db connect[/cyan] [dim]first.[/dim]"
        )
        return 1

    try:
        schema = _resolve_schema(args)
    except SchemaLoadError as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1
    if schema is None:
        console.print(
            "[yellow]No schema to validate against.[/yellow] "
            "[dim]Pass --schema or set [schema] target in db.toml.[/dim]"
        )
        return 1

    console.print(
        f"Validating schema for profile: [bold cyan]{profile}[/bold cyan]"
    )

    result = await connect_and_validate(
        schema, profile_name=profile, env_prefix=env_prefix, validate_only=True
    )

    if result.success:
        console.print()
        console.print("[bold green]v[/bold green] Schema is valid")
        if result.schema_report and result.schema_report.extra_tables:
            console.print(
                f"  Extra tables: [yellow]"
                f"{', '.join(result.schema_report.extra_tables)}[/yellow]"
            )
        return 0

    console.print()
    if result.schema_report:
        console.print("[bold red]x[/bold red] Schema has drifted")
        console.print(result.schema_report.format_report(), markup=False)
    else:
        console.print(f"[bold red]x[/bold red] {result.error}")
    return 1


# ============================================================================
# Sync command wrappers (status, profiles, inspect and generate use no database)
# ============================================================================


def cmd_connect(args: argparse.Namespace) -> int:
    """Connect to database and validate schema.

    Wraps the async implementation with ``asyncio.run()``.
    """
    return asyncio.run(_async_connect(args))


def cmd_validate(args: argparse.Namespace) -> int:
    """Re-validate current profile schema.

    Wraps the async implementation with ``asyncio.run()``.
    """
    return asyncio.run(_async_validate(args))


def cmd_status(args: argparse.Namespace) -> int:
    """Show current connection status.

    Reads only local files (lock file and TOML config).

    Returns:
        0 always (informational command).
    """
    profile = read_profile_lock()

    if profile:
        table = Table(title="Connection Status", show_header=False)
        table.add_column("Key", style="dim")
        table.add_column("Value")

        table.add_row("Current profile", f"[bold cyan]{profile}[/bold cyan]")
        table.add_row("Profile source", ".db-profile (validated)")

        try:
            config = load_db_config()
            if profile in config.profiles:
                p = config.profiles[profile]
                table.add_row("Provider", p.provider)
                if p.description:
                    table.add_row("Description", p.description)
            if config.schema_target:
                table.add_row("Schema", config.schema_target)
        except FileNotFoundError:
            table.add_row("Warning", "[yellow]db.toml not found[/yellow]")

        console.print(table)
    else:
        console.print("[yellow]No validated profile.[/yellow]")
        console.print(
            "[dim]Run:[/dim] [cyan]DB_PROFILE=<name> schema-db connect[/cyan]"
        )

    return 0


def cmd_profiles(args: argparse.Namespace) -> int:
    """List available profiles from db.toml.

    Returns:
        0 on success, 1 if db.toml not found or invalid.
    """
    try:
        config = load_db_config()
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1

    current = read_profile_lock()

    table = Table(title="Database Profiles", show_header=True, header_style="bold")
    table.add_column("", width=2)
    table.add_column("Profile")
    table.add_column("Provider")
    table.add_column("Description")

    for name, profile in config.profiles.items():
        marker = "[bold green]*[/bold green]" if name == current else " "
        table.add_row(
            marker,
            f"[bold cyan]{name}[/bold cyan]" if name == current else name,
            profile.provider,
            profile.description or "",
        )

    console.print(table)

    if current:
        console.print("\n[bold green]*[/bold green] = current profile")

    return 0


def cmd_inspect(args: argparse.Namespace) -> int:
    """Print the models, fields and relations of a schema.

    Returns:
        0 on success, 1 if the schema cannot be loaded.
    """
    try:
        schema = load_schema(args.schema)
    except SchemaLoadError as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1

    fields_table = Table(title="Models", show_header=True, header_style="bold")
    fields_table.add_column("Model", style="cyan")
    fields_table.add_column("Field")
    fields_table.add_column("Type")
    fields_table.add_column("Flags", style="dim")
    fields_table.add_column("References")

    relations_table = Table(title="Relations", show_header=True, header_style="bold")
    relations_table.add_column("Model", style="cyan")
    relations_table.add_column("Join name")
    relations_table.add_column("Kind")
    relations_table.add_column("Related")
    relations_table.add_column("On delete", style="dim")

    for key, definition in schema.items():
        label = key if definition.model_name == key else f"{key} ({definition.model_name})"
        fields_table.add_row(label, "id", "string", "primary key", "")
        for name, field in definition.fields.items():
            flags = [
                flag
                for flag, enabled in (
                    ("required", field.required),
                    ("unique", field.unique),
                    ("default", field.has_default),
                )
                if enabled
            ]
            ref = field.references
            fields_table.add_row(
                "",
                name if not field.field_name else f"{name} ({field.field_name})",
                field.type.value,
                ", ".join(flags),
                f"{ref.model}.{ref.field}" if ref else "",
            )

        for relation in get_relations(schema, key).all:
            relations_table.add_row(
                key,
                relation.name,
                f"{relation.kind} ({relation.direction})",
                f"{relation.related_model}.{relation.related_key_field}",
                relation.on_delete.value,
            )

    console.print(fields_table)
    if relations_table.row_count:
        console.print(relations_table)
    return 0


def cmd_generate(args: argparse.Namespace) -> int:
    """Generate CREATE TABLE statements for a schema.

    Returns:
        0 on success, 1 on failure.
    """
    try:
        schema = load_schema(args.schema)
    except SchemaLoadError as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1

    exclude = _split_names(args.exclude)
    if args.exclude_auth:
        exclude.extend(DEFAULT_AUTH_MODELS)

    try:
        sql = generate_ddl(
            schema,
            dialect=args.dialect,
            exclude=exclude,
            use_number_id=args.use_number_id,
        )
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1

    if args.output:
        output = Path(args.output)
        output.write_text(sql)
        console.print(
            f"[bold green]v[/bold green] Wrote {args.dialect} DDL to "
            f"[cyan]{output}[/cyan]"
        )
    else:
        console.print(sql, markup=False, highlight=False, soft_wrap=True)
    return 0


# ============================================================================
# Main entry point
# ============================================================================


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point.

    Parses command line arguments and dispatches to appropriate handler.

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    parser = argparse.ArgumentParser(
        prog="schema-db",
        description="Schema inspection, DDL generation and database profiles",
    )

    parser.add_argument(
        "--env-prefix",
        default="",
        help=(
            "Prefix for environment variable lookup "
            "(e.g., --env-prefix APP_ reads APP_DB_PROFILE)"
        ),
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    p_connect = subparsers.add_parser(
        "connect",
        help="Connect to database and validate schema",
    )
    p_connect.add_argument(
        "--schema",
        help="Schema target (module:attribute or file.py); defaults to db.toml",
    )
    p_connect.set_defaults(func=cmd_connect)

    p_status = subparsers.add_parser(
        "status",
        help="Show current connection status",
    )
    p_status.set_defaults(func=cmd_status)

    p_profiles = subparsers.add_parser(
        "profiles",
        help="List available profiles",
    )
    p_profiles.set_defaults(func=cmd_profiles)

    p_validate = subparsers.add_parser(
        "validate",
        help="Re-validate current profile schema",
    )
    p_validate.add_argument(
        "--schema",
        help="Schema target (module:attribute or file.py); defaults to db.toml",
    )
    p_validate.set_defaults(func=cmd_validate)

    p_inspect = subparsers.add_parser(
        "inspect",
        help="Show models, fields and relations of a schema",
    )
    p_inspect.add_argument("--schema", required=True, help="Schema target")
    p_inspect.set_defaults(func=cmd_inspect)

    p_generate = subparsers.add_parser(
        "generate",
        help="Write CREATE TABLE statements for a schema",
    )
    p_generate.add_argument("--schema", required=True, help="Schema target")
    p_generate.add_argument(
        "--dialect",
        default="postgresql",
        choices=sorted(DIALECTS),
        help="SQL dialect (default: postgresql)",
    )
    p_generate.add_argument(
        "--exclude",
        help="Comma-separated model keys or names to leave out",
    )
    p_generate.add_argument(
        "--exclude-auth",
        action="store_true",
        help=f"Leave out authentication models ({', '.join(DEFAULT_AUTH_MODELS)})",
    )
    p_generate.add_argument(
        "--use-number-id",
        action="store_true",
        help="Integer autoincrement ids instead of text ids",
    )
    p_generate.add_argument(
        "--output",
        "-o",
        help="Write to this file instead of stdout",
    )
    p_generate.set_defaults(func=cmd_generate)

    args = parser.parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
