"""Watch command."""

import queue

import click
from rich import get_console

from ..connectivity import ConnectivityProbe, ConnectivitySignal
from ..errors import StorageUnavailableError
from . import cli
from .logger import configure_logging
from .runtime import build_service, load_cli_config


@cli.command()
@click.option("-d", "--dir", "data_dir", default=None, help="Data directory (default: .dbxjson)")
@click.option(
    "-c", "--config", "config_file", default=None, help="Config file (default: <dir>/dbxjson.yaml)"
)
@click.option("--once", is_flag=True, default=False, help="Run a single poll and exit.")
@click.option("-v", "--verbose", is_flag=True, default=False, help="Verbose mode.")
def watch(data_dir: str | None, config_file: str | None, once: bool, verbose: bool) -> None:
    """Keep the catalogs in sync and print every updated file.

    We first load the files on disk and download the catalogs, then poll
    Dropbox for new revisions while the network is reachable. Stop with
    Ctrl-C.
    """
    configure_logging(verbose)
    console = get_console()
    resolved, config = load_cli_config(data_dir, config_file)
    catalogs = config.build_catalogs()

    signal = None if once else ConnectivitySignal()
    with build_service(resolved, config, connectivity=signal) as service:
        try:
            for catalog in catalogs:
                service.load_local_files(catalog)
                service.prepare_content(catalog)
        except StorageUnavailableError as exc:
            raise click.ClickException(str(exc)) from exc

        if not service.prepared:
            raise click.ClickException("Cannot download any catalog: see above logs")

        with service.subscribe() as updates:
            if once:
                refreshed = service.poll_once()
                for item in updates.drain():
                    console.print(f"[green]U[/] {item.file_name}")
                click.echo(f"Updated {refreshed} file(s).")
                return

            assert signal is not None
            probe = ConnectivityProbe(
                signal,
                config.connectivity.probe_url,
                interval=config.connectivity.interval,
            )
            probe.start()
            try:
                while True:
                    try:
                        item = updates.get(timeout=1.0)
                    except queue.Empty:
                        continue
                    console.print(f"[green]U[/] {item.file_name}")
            except KeyboardInterrupt:
                click.echo("Interrupted.", err=True)
            finally:
                probe.stop()
