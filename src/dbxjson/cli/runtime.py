"""Helpers shared by the commands needing the configured service."""

from __future__ import annotations

from pathlib import Path

import click

from ..config import Config, config_path_for_data_dir, load_config
from ..connectivity import ConnectivitySignal
from ..errors import ConfigError
from ..remote import DropboxRemoteStore, LocalFolderRemoteStore, RemoteStore
from ..service import JSONSyncService
from ..store import data_dir_or_default


def load_cli_config(data_dir: str | None, config_file: str | None) -> tuple[Path, Config]:
    """Resolve the data directory and load the configuration file."""
    resolved = data_dir_or_default(data_dir)
    config_path = Path(config_file) if config_file else config_path_for_data_dir(resolved)
    try:
        return resolved, load_config(config_path)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc


def build_service(
    data_dir: Path,
    config: Config,
    *,
    connectivity: ConnectivitySignal | None = None,
) -> JSONSyncService:
    """Create a JSONSyncService talking to the configured remote."""
    return JSONSyncService(
        build_remote(config),
        data_dir=data_dir,
        connectivity=connectivity,
        poll_interval=config.poll_interval,
        max_workers=config.max_workers,
    )


def build_remote(config: Config) -> RemoteStore:
    """Create the remote store selected by the configured provider."""
    if config.provider == "local":
        assert config.local is not None
        try:
            return LocalFolderRemoteStore(config.local.path, page_size=config.local.page_size)
        except FileNotFoundError as exc:
            raise click.ClickException(str(exc)) from exc
    return DropboxRemoteStore(
        config.dropbox.access_token(),
        timeout=config.dropbox.timeout,
        max_retries=config.dropbox.max_retries,
    )
