"""Configuration file of the dbxjson command-line tool.

The configuration is a YAML file, by default `$datadir/dbxjson.yaml`:

    version: 0
    provider: dropbox
    poll_interval: 10
    dropbox:
      token_env: DROPBOX_ACCESS_TOKEN
    connectivity:
      probe_url: https://api.dropboxapi.com
      interval: 15
    catalogs:
      - folder: /JSONs
        files:
          - genres.json
          - countries.json

The Dropbox token itself is never stored in the file: we read it from
the environment variable named by `dropbox.token_env`.

Setting `provider: local` and `local: {path: DIR}` serves the catalogs
from a local directory instead of Dropbox.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Final

import dacite
import yaml

from .catalog import Catalog
from .decode import DACITE_CONFIG
from .errors import ConfigError

CONFIG_DEFAULT_FILENAME: Final[str] = "dbxjson.yaml"
PROVIDERS: Final[tuple[str, ...]] = ("dropbox", "local")


@dataclass(frozen=True, kw_only=True)
class DropboxConfig:
    token_env: str = "DROPBOX_ACCESS_TOKEN"
    timeout: float = 30.0
    max_retries: int = 3

    def access_token(self) -> str | None:
        """Return the access token from the environment, if set."""
        return os.environ.get(self.token_env) or None


@dataclass(frozen=True, kw_only=True)
class LocalFolderConfig:
    path: str
    page_size: int = 100


@dataclass(frozen=True, kw_only=True)
class ConnectivityConfig:
    probe_url: str = "https://api.dropboxapi.com"
    interval: float = 15.0


@dataclass(frozen=True, kw_only=True)
class CatalogConfig:
    folder: str
    files: list[str]

    def to_catalog(self) -> Catalog:
        return Catalog.from_files(self.folder, self.files)


@dataclass(frozen=True, kw_only=True)
class Config:
    """Top-level configuration."""

    version: int
    catalogs: list[CatalogConfig]
    provider: str = "dropbox"
    poll_interval: float = 10.0
    max_workers: int = 8
    dropbox: DropboxConfig = field(default_factory=DropboxConfig)
    local: LocalFolderConfig | None = None
    connectivity: ConnectivityConfig = field(default_factory=ConnectivityConfig)

    def build_catalogs(self) -> list[Catalog]:
        return [entry.to_catalog() for entry in self.catalogs]


def config_path_for_data_dir(data_dir: Path) -> Path:
    """Return the default configuration path under the given data directory."""
    return data_dir / CONFIG_DEFAULT_FILENAME


def load_config(config_path: Path) -> Config:
    """
    Load the configuration from the given YAML file.

    Raises:
        ConfigError: if the file is missing or invalid.
    """
    try:
        content = config_path.read_text()
    except FileNotFoundError as exc:
        raise ConfigError(f"Config not found: {config_path}") from exc

    try:
        data = yaml.safe_load(content) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {config_path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigError("Config must be a mapping.")

    try:
        config = dacite.from_dict(
            Config,
            data,
            config=DACITE_CONFIG,
        )
    except (dacite.DaciteError, TypeError) as exc:
        raise ConfigError(f"Invalid config: {exc}") from exc

    if config.version != 0:
        raise ConfigError(f"Unsupported config version: {config.version}")

    if config.provider not in PROVIDERS:
        valid = ", ".join(PROVIDERS)
        raise ConfigError(f"Unsupported provider: {config.provider} (valid: {valid})")

    if config.provider == "local" and config.local is None:
        raise ConfigError("local.path is required when provider is local.")

    if not config.catalogs:
        raise ConfigError("Config must include at least one catalog.")

    if any(not entry.files for entry in config.catalogs):
        raise ConfigError("Every catalog must include at least one file.")

    if config.poll_interval <= 0:
        raise ConfigError("poll_interval must be positive.")

    try:
        config.build_catalogs()
    except ValueError as exc:
        raise ConfigError(f"Invalid catalog: {exc}") from exc

    return config
