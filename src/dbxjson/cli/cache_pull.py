"""Cache pull command."""

import time

import click

from ..errors import StorageUnavailableError
from .cache import cache
from .logger import configure_logging
from .runtime import build_service, load_cli_config


@cache.command()
@click.option("-d", "--dir", "data_dir", default=None, help="Data directory (default: .dbxjson)")
@click.option(
    "-c", "--config", "config_file", default=None, help="Config file (default: <dir>/dbxjson.yaml)"
)
@click.option("-v", "--verbose", is_flag=True, default=False, help="Verbose mode.")
def pull(data_dir: str | None, config_file: str | None, verbose: bool) -> None:
    """Download the configured catalogs from Dropbox.

    Catalogs that cannot be downloaded are still usable when all their
    files are already on disk. We exit with 1 only when a catalog is
    neither downloaded nor complete on disk.
    """
    configure_logging(verbose)
    resolved, config = load_cli_config(data_dir, config_file)
    catalogs = config.build_catalogs()

    failed: list[str] = []
    t0 = time.monotonic()
    with build_service(resolved, config) as service:
        for catalog in catalogs:
            try:
                local_ok = service.load_local_files(catalog)
                remote_ok = service.prepare_content(catalog)
            except StorageUnavailableError as exc:
                raise click.ClickException(str(exc)) from exc
            if not local_ok and not remote_ok:
                failed.append(catalog.folder_path or "/")
    elapsed = time.monotonic() - t0

    ok = len(catalogs) - len(failed)
    click.echo(f"Synced {ok}/{len(catalogs)} catalog(s) in {elapsed:.1f}s.")

    if failed:
        click.echo(f"{len(failed)} catalog(s) unavailable:", err=True)
        for folder in failed:
            click.echo(f"  {folder}", err=True)
        raise SystemExit(1)
