"""Configuration settings for aurorder."""

from __future__ import annotations

from enum import Enum
from pathlib import Path  # noqa: TC003

from pydantic import Field
from pydantic_settings import (
    BaseSettings,
    CliImplicitFlag,
    CliPositionalArg,
    SettingsConfigDict,
)

from .aur import DEFAULT_BASEURL, SearchBy
from .pacman import DEFAULT_PACMAN_CONFIG


class Command(str, Enum):
    """Commands understood by aurorder."""

    buildorder = "buildorder"
    resolve = "resolve"
    clone = "clone"
    info = "info"
    search = "search"
    outdated = "outdated"


class Settings(BaseSettings):
    """Settings for aurorder."""

    command: CliPositionalArg[Command] = Field(
        description="""`buildorder` prints the order in which to build the
            targets, `resolve` lists the packages providing each target spec,
            `clone` fetches the recipes of every AUR package in build order,
            `info` shows the AUR record of each target, `search` finds AUR
            packages matching every given pattern and `outdated` lists foreign
            packages with a newer version on the AUR.""",
    )
    targets: CliPositionalArg[list[str]] = Field(
        default_factory=list,
        description="""Packages to operate on, optionally with a version
            constraint such as `curl>8`. For `search` these are regular
            expressions; for `outdated` they restrict the check to the named
            packages.""",
    )
    baseurl: str = Field(
        default=DEFAULT_BASEURL,
        description="""Base URL of the AUR instance to query.""",
    )
    pacman_config: Path = Field(
        default=DEFAULT_PACMAN_CONFIG,
        description="""pacman configuration used to find the local package
            databases.""",
    )
    local_db: Path | None = Field(
        default=None,
        description="""JSON snapshot of the installed and repository packages
            to use instead of the databases named in `--pacman-config`.""",
    )
    resolve_deps: str = Field(
        default="depends,makedepends,checkdepends",
        description="""Dependency kinds to follow, as a comma separated list
            of `depends`, `makedepends` and `checkdepends`. Prefix the list
            with `+` to add kinds to the default or with `^` to remove them.""",
    )
    max_connections: int = Field(
        default=20,
        description="""Maximum number of concurrent requests to the AUR.""",
    )
    connect_timeout: float = Field(
        default=10,
        description="""Timeout in seconds for requests to the AUR.""",
    )
    chdir: Path | None = Field(
        default=None,
        description="""Directory to clone recipes into. Defaults to the
            current directory.""",
    )
    searchby: SearchBy = Field(
        default=SearchBy.name_desc,
        description="""Field the AUR matches `search` patterns against.""",
    )
    literal: CliImplicitFlag[bool] = Field(
        default=False,
        description="""Treat `search` patterns as plain strings rather than
            regular expressions.""",
    )
    quiet: CliImplicitFlag[bool] = Field(
        default=False,
        description="""Only print package names.""",
    )
    log_level: str = Field(default="info", description="Log level")
    version: CliImplicitFlag[bool] = Field(
        default=False,
        description="""Show the version of aurorder and exit.""",
    )

    model_config = SettingsConfigDict(
        env_prefix="AURORDER_",
        cli_prog_name="aurorder",
        cli_kebab_case=True,
        coerce_numbers_to_str=True,
    )
