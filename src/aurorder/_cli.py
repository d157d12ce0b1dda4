"""Command-line interface for aurorder."""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING

from . import __version__ as aurorder_version
from . import queries
from .aur import AurClient, TransportError
from .config import Command, Settings
from .logger import setup_logger
from .models import Dependency, parse_dependency_kinds
from .pacman import LocalDatabase, PacmanConfig
from .queries import InvalidSearchError
from .recipes import RecipeFetchError, fetch_recipes
from .resolution import ResolutionContext, TargetNotFoundError, build_order, resolve_providers

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

logger = logging.getLogger(__name__)

QUERY_COMMANDS = frozenset({Command.info, Command.search, Command.outdated})


def load_local_database(settings: Settings) -> LocalDatabase:
    """Load the local package snapshot named by the settings."""
    if settings.local_db is not None:
        return LocalDatabase.from_json(settings.local_db)
    if not settings.pacman_config.exists():
        logger.warning("%s not found; assuming no installed or repository packages", settings.pacman_config)
        return LocalDatabase()
    return LocalDatabase.from_pacman(PacmanConfig.from_file(settings.pacman_config))


def run_query(settings: Settings, client: AurClient, output_write: Callable[[str], object]) -> int:
    """Run one of the read-only query commands, returning the exit status.

    Raises:
        InvalidSearchError: if a search pattern is unusable.
        TransportError: if a request to the AUR fails.
        OSError: if the local package database cannot be read.
        ValueError: if the local package database snapshot is invalid.

    """
    if settings.command is not Command.outdated and not settings.targets:
        logger.error("not enough arguments: at least one target is required")
        return 1
    database = load_local_database(settings)
    installed = {package.name: package for package in database.installed}

    if settings.command is Command.search:
        for record in queries.search(client, settings.targets, settings.searchby, settings.literal):
            if settings.quiet:
                output_write(f"{record.name}\n")
            else:
                output_write(queries.format_short(record, installed.get(record.name)))
        return 0

    if settings.command is Command.info:
        records = queries.info(client, settings.targets)
        if not records:
            logger.error("no results found for %s", ", ".join(settings.targets))
            return 1
        for record in records:
            output_write(queries.format_long(record, settings.baseurl, installed.get(record.name)))
        return 0

    for update in queries.outdated(client, database, settings.targets):
        output_write(f"{update.name}\n" if settings.quiet else f"{update}\n")
    return 0


def run(settings: Settings, output_write: Callable[[str], object]) -> int:  # noqa: C901, PLR0911, PLR0912
    """Run the command described by ``settings``, returning the exit status."""
    if settings.version:
        output_write(f"aurorder {aurorder_version}\n")
        return 0

    if settings.command in QUERY_COMMANDS:
        client = AurClient(settings.baseurl, timeout=settings.connect_timeout, max_connections=settings.max_connections)
        try:
            return run_query(settings, client, output_write)
        except InvalidSearchError as e:
            logger.error("%s", e)  # noqa: TRY400
            return 1
        except (OSError, ValueError) as e:
            logger.error("failed to load the local package database: %s", e)  # noqa: TRY400
            return 1
        except TransportError as e:
            logger.error("request failed: %s", e)  # noqa: TRY400
            return 1

    # malformed input is rejected before anything touches the network
    try:
        targets = [Dependency.from_string(target) for target in settings.targets]
        kinds = parse_dependency_kinds(settings.resolve_deps)
    except ValueError as e:
        logger.error("%s", e)  # noqa: TRY400
        return 1
    if not targets:
        logger.error("not enough arguments: at least one target is required")
        return 1

    try:
        database = load_local_database(settings)
    except (OSError, ValueError) as e:
        logger.error("failed to load the local package database: %s", e)  # noqa: TRY400
        return 1

    ignored = [target.name for target in targets if database.should_ignore(target.name)]
    for name in ignored:
        logger.info("%s is ignored by the pacman configuration", name)
    targets = [target for target in targets if target.name not in ignored]
    if not targets:
        return 0

    client = AurClient(settings.baseurl, timeout=settings.connect_timeout, max_connections=settings.max_connections)
    context = ResolutionContext(client, database.to_index(), kinds)

    try:
        if settings.command is Command.resolve:
            for match in resolve_providers(targets, context):
                output_write(f"{match.name}\n" if settings.quiet else f"{match}\n")
            return 0

        plan = build_order(targets, context)
        if settings.command is Command.buildorder:
            for line in plan.lines():
                output_write(line)
            return plan.exit_status

        for checkout in fetch_recipes(plan, settings.chdir or ".", settings.baseurl):
            output_write(f"{checkout}\n")
        return plan.exit_status
    except TransportError as e:
        logger.error("request failed: %s", e)  # noqa: TRY400
        return 1
    except TargetNotFoundError as e:
        logger.error("%s", e)  # noqa: TRY400
        return 1
    except RecipeFetchError as e:
        logger.error("%s", e)  # noqa: TRY400
        return 1


def main(argv: Sequence[str] | None = None) -> int:
    settings = Settings(_cli_parse_args=list(argv) if argv is not None else True)
    setup_logger(settings.log_level)

    logger.debug("Starting aurorder with settings: %s", settings)

    return run(settings, sys.stdout.write)
