"""Command-line interface for MenuGate.

This module provides the CLI commands for running and managing
the MenuGate application.
"""

import asyncio
import json
import sys
from datetime import timedelta
from typing import NoReturn

import click

from menugate.core.config import get_settings
from menugate.core.logging import LoggingContext, configure_logging, get_logger


@click.group()
@click.version_option(version="0.1.0", prog_name="MenuGate")
@click.option(
    "--debug/--no-debug",
    default=False,
    help="Enable debug mode",
)
def cli(debug: bool) -> None:
    """MenuGate - hierarchical menu and permission resolution service."""
    # Settings are loaded via MENUGATE_* environment variables


@cli.command()
@click.option("--host", type=str, default=None, help="Host to bind to (overrides config)")
@click.option("--port", type=int, default=None, help="Port to bind to (overrides config)")
@click.option(
    "--workers",
    type=int,
    default=None,
    help="Number of worker processes (overrides config)",
)
@click.option(
    "--reload",
    is_flag=True,
    default=False,
    help="Enable auto-reload for development",
)
def serve(host: str | None, port: int | None, workers: int | None, reload: bool) -> None:
    """Start the MenuGate server."""
    import uvicorn

    settings = get_settings()

    bind_host = host or settings.host
    bind_port = port or settings.port
    bind_workers = workers or settings.workers

    configure_logging(settings)

    logger = get_logger(__name__)
    logger.info(
        "Starting MenuGate server",
        host=bind_host,
        port=bind_port,
        workers=bind_workers,
        reload=reload,
        environment=settings.environment,
    )

    uvicorn.run(
        "menugate.infrastructure.api.app:app",
        host=bind_host,
        port=bind_port,
        workers=1 if reload else bind_workers,
        reload=reload,
        log_level=settings.log_level.lower(),
        access_log=True,
    )


@cli.command()
@click.option(
    "--force",
    is_flag=True,
    help="Skip confirmation prompt",
)
def init_db(force: bool) -> None:
    """Initialize the database.

    Creates all tables and seeds the built-in named roles. Use this only in
    development; other environments manage their schema externally.
    """
    from menugate.infrastructure.persistence.database import (
        get_db_manager,
        init_database,
    )

    settings = get_settings()
    configure_logging(settings)

    if settings.is_production and not force:
        click.echo(
            "ERROR: Running in production mode. Refusing to create tables.",
            err=True,
        )
        raise SystemExit(1)

    if not force:
        click.confirm(
            "This will create all database tables. Continue?",
            abort=True,
            default=False,
        )

    async def initialize():
        try:
            await init_database()
            click.echo("Database initialized successfully.")
        finally:
            await get_db_manager().disconnect()

    asyncio.run(initialize())


@cli.command()
def info() -> None:
    """Display MenuGate configuration and system information."""
    settings = get_settings()

    click.echo(f"""
MenuGate v{settings.app_version}
{'=' * 40}

Configuration:
  Environment:  {settings.environment}
  Debug:        {settings.debug}
  API Prefix:   {settings.api_prefix}

Server:
  Host:         {settings.host}
  Port:         {settings.port}
  Workers:      {settings.workers}

Database:
  URL:          {settings.database_url}
  Pool Size:    {settings.db_pool_size}
  Echo:         {settings.db_echo}

Security:
  Token Expire: {settings.access_token_expire_minutes} minutes

Menu cache:
  TTL:          {settings.menu_cache_ttl_seconds} seconds

Logging:
  Level:        {settings.log_level}
  Format:       {settings.log_format}
""")


def _echo_tree(tree) -> None:
    for depth, node in tree.iter_preorder():
        company = "*" if node.company_id is None else node.company_id
        flags = " (open)" if node.is_open else ""
        click.echo(f"{'  ' * depth}- {node.name} [id={node.id} order={node.order} company={company}]{flags}")

    report = tree.report
    if report.has_anomalies:
        click.echo("\nAnomalies:")
        if report.orphan_ids:
            click.echo(f"  Orphans promoted to root: {report.orphan_ids}")
        if report.cyclic_ids:
            click.echo(f"  Excluded (parent cycle):  {report.cyclic_ids}")
        if report.detached_ids:
            click.echo(f"  Excluded (below a cycle): {report.detached_ids}")


@cli.command()
@click.option(
    "--company-id",
    type=int,
    default=None,
    help="Only show menus visible to this company",
)
def show_menus(company_id: int | None) -> None:
    """Print the full menu tree and any structural anomalies."""
    from menugate.domain.entities import CompanyAccess, Identity, RoleLevel
    from menugate.domain.services import MenuAccessService
    from menugate.infrastructure.persistence.database import get_db_manager, init_database

    configure_logging(get_settings())

    scope = None
    if company_id is not None:
        scope = Identity(
            user_id="cli",
            role=RoleLevel.ROOT,
            company_id=company_id,
            company_access=CompanyAccess.OWN,
        )

    async def show():
        db = get_db_manager()
        try:
            await init_database()
            async with db.session() as session:
                tree = await MenuAccessService(session).load_tree(scope)
            if tree.is_empty and not tree.report.has_anomalies:
                click.echo("No menus.")
                return
            _echo_tree(tree)
        finally:
            await db.disconnect()

    asyncio.run(show())


@cli.command()
@click.argument("file", type=click.File("r"))
def import_menus(file) -> None:
    """Import raw menu records from a JSON FILE.

    FILE holds a list of objects with ``id``, ``name`` and optionally
    ``parent_id``, ``order``, ``name_localized``, ``icon``, ``url``,
    ``company_id`` and ``is_open``. Records are stored as given; dangling
    parents and cycles are reported afterwards.
    """
    from menugate.domain.entities import MenuNode
    from menugate.domain.exceptions import MenuEngineError
    from menugate.domain.services import MenuAccessService, MenuService
    from menugate.infrastructure.persistence.database import get_db_manager, init_database

    configure_logging(get_settings())
    logger = get_logger(__name__)

    try:
        raw_records = json.load(file)
    except json.JSONDecodeError as e:
        click.echo(f"Error: invalid JSON: {e}", err=True)
        raise SystemExit(1)
    if not isinstance(raw_records, list):
        click.echo("Error: expected a JSON list of menu records", err=True)
        raise SystemExit(1)

    try:
        records = [
            MenuNode(
                id=raw["id"],
                name=raw["name"],
                order=raw.get("order", raw.get("order_num", 0)),
                parent_id=raw.get("parent_id"),
                name_localized=raw.get("name_localized"),
                icon=raw.get("icon"),
                url=raw.get("url"),
                company_id=raw.get("company_id"),
                is_open=bool(raw.get("is_open", False)),
            )
            for raw in raw_records
        ]
    except KeyError as e:
        click.echo(f"Error: record is missing field {e}", err=True)
        raise SystemExit(1)
    except MenuEngineError as e:
        click.echo(f"Error: {e.message}", err=True)
        raise SystemExit(1)

    async def run_import():
        db = get_db_manager()
        try:
            await init_database()
            async with db.session() as session:
                count = await MenuService(session).import_menus(records)
            async with db.session() as session:
                tree = await MenuAccessService(session).load_tree()
            click.echo(f"Imported {count} menus.")
            report = tree.report
            if report.has_anomalies:
                click.echo(f"Orphans promoted to root: {report.orphan_ids}")
                click.echo(f"Excluded by parent cycles: {report.cyclic_ids + report.detached_ids}")
            logger.info("Menus imported via CLI", count=count)
        except MenuEngineError as e:
            click.echo(f"Error: {e.message}", err=True)
            raise SystemExit(1)
        finally:
            await db.disconnect()

    # Tags every log line of the import with the source file
    with LoggingContext(operation="import_menus", source=file.name):
        asyncio.run(run_import())


@cli.command()
@click.option("--user-id", type=str, required=True, help="User ID from the identity provider")
@click.option("--username", type=str, default=None, help="Display name (defaults to the ID)")
@click.option("--company-id", type=int, default=None, help="Company the user belongs to")
@click.option("--role", type=str, default="user", show_default=True, help="Canonical level or named role")
def add_user(user_id: str, username: str | None, company_id: int | None, role: str) -> None:
    """Add a user to the directory mirror."""
    from menugate.domain.entities import RoleLevel
    from menugate.domain.services import IdentityService
    from menugate.infrastructure.persistence.database import get_db_manager, init_database
    from menugate.infrastructure.persistence.models import UserModel
    from menugate.infrastructure.persistence.repositories import UserRepository

    configure_logging(get_settings())
    logger = get_logger(__name__)

    async def create() -> None:
        db = get_db_manager()
        try:
            await init_database()
            async with db.session() as session:
                repo = UserRepository(session)
                if await repo.get_by_id(user_id) is not None:
                    click.echo(f"Error: user '{user_id}' already exists", err=True)
                    raise SystemExit(1)

                level, company_access = await IdentityService(session).resolve_role(role)
                if level is RoleLevel.NONE and role != RoleLevel.NONE.value:
                    click.echo(f"Warning: role '{role}' is unknown and resolves to 'none'", err=True)

                await repo.create(
                    UserModel(
                        id=user_id,
                        username=username or user_id,
                        company_id=company_id,
                        role=role,
                        is_active=True,
                    )
                )
                await session.commit()

            click.echo(
                f"User created:\n"
                f"  User ID:        {user_id}\n"
                f"  Company:        {company_id}\n"
                f"  Role:           {role} ({level.value}, company access {company_access.value})"
            )
            logger.info("User created via CLI", user_id=user_id, company_id=company_id, role=role)
        finally:
            await db.disconnect()

    asyncio.run(create())


@cli.command()
@click.option("--user-id", type=str, required=True, help="Existing user to mint a token for")
@click.option(
    "--expires-minutes",
    type=int,
    default=None,
    help="Token lifetime (defaults to config)",
)
def issue_token(user_id: str, expires_minutes: int | None) -> None:
    """Mint a bearer token for an existing user (development helper)."""
    from menugate.infrastructure.auth import jwt_service
    from menugate.infrastructure.persistence.database import get_db_manager, init_database
    from menugate.infrastructure.persistence.repositories import UserRepository

    settings = get_settings()
    configure_logging(settings)

    if settings.is_production:
        click.echo("ERROR: Refusing to mint tokens in production mode.", err=True)
        raise SystemExit(1)

    async def mint() -> str:
        db = get_db_manager()
        try:
            await init_database()
            async with db.session() as session:
                user = await UserRepository(session).get_by_id(user_id)
            if user is None or not user.is_active:
                click.echo(f"Error: no active user '{user_id}'", err=True)
                raise SystemExit(1)
            return jwt_service.create_access_token(
                user_id=user.id,
                role=user.role,
                company_id=user.company_id,
                expires_delta=timedelta(minutes=expires_minutes) if expires_minutes else None,
            )
        finally:
            await db.disconnect()

    click.echo(asyncio.run(mint()))


def main() -> NoReturn:
    """Main entry point for the CLI.

    This function is called when the `menugate` command is run
    or when using `python -m menugate`.
    """
    cli()


def serve_main() -> NoReturn:
    """Entry point that defaults to the serve command."""
    sys.argv[0] = "menugate"
    if len(sys.argv) == 1:
        sys.argv.append("serve")
    main()


if __name__ == "__main__":
    main()
