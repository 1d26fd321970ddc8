"""Cache status command."""

import click
from rich.console import Console

from ..store import LocalStore
from .cache import cache
from .runtime import load_cli_config


@cache.command()
@click.option("-d", "--dir", "data_dir", default=None, help="Data directory (default: .dbxjson)")
@click.option(
    "-c", "--config", "config_file", default=None, help="Config file (default: <dir>/dbxjson.yaml)"
)
def status(data_dir: str | None, config_file: str | None) -> None:
    """Show which catalog files are cached locally.

    Each file path is prefixed with a status letter:

    \b
      'D'  needs download (in the catalog, not on disk)

    Files already on disk are prefixed by a space.
    """
    resolved, config = load_cli_config(data_dir, config_file)
    store = LocalStore(resolved)

    console = Console()
    for catalog in config.build_catalogs():
        for file_name in catalog.file_names():
            char, color = (" ", "dim") if store.exists(store.resolve(file_name)) else ("D", "red")
            console.print(f"[{color}]{char}[/] {catalog.folder_path}/{file_name}")
