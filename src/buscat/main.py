import logging
import signal
from typing import List, Optional

import typer
from typing_extensions import Annotated

from buscat.config import (
    DEFAULT_CLIENT_ID,
    DEFAULT_CLUSTER_ID,
    DEFAULT_SERVER_URL,
    SERVER_ENV_VAR,
    SERVICE_NAME,
    VERSION,
    Mode,
    resolve_config,
)
from buscat.exceptions import ConfigError, TransportError
from buscat.logging_config import setup_logging
from buscat.repository.rabbitmq import connect
from buscat.service import CatService

app = typer.Typer(add_completion=False, rich_markup_mode=None)
logger = logging.getLogger(__name__)


def _version_callback(value: bool):
    if value:
        typer.echo(f"{SERVICE_NAME}: version {VERSION}")
        raise typer.Exit()


def _install_signal_handlers(service: CatService) -> None:
    def handle_signal(signum, frame):
        logger.info("Received signal %s, stopping", signal.Signals(signum).name)
        service.stop()

    for sig in (signal.SIGINT, signal.SIGTERM):
        signal.signal(sig, handle_signal)


@app.command(
    options_metavar="[global options]",
)
def cat(
    ctx: typer.Context,
    words: Annotated[
        Optional[List[str]],
        typer.Argument(
            metavar="[message to post]",
            help="Words joined into the message to publish",
            show_default=False,
        ),
    ] = None,
    subject: Annotated[
        str,
        typer.Option(
            "--subject",
            "-s",
            help="[Required] subject ('*' and '>' wildcards only valid when listening)",
        ),
    ] = "",
    listen: Annotated[
        bool, typer.Option("--listen", "-l", help="listen for messages")
    ] = False,
    buffered: Annotated[
        bool,
        typer.Option(
            "--buffered",
            "-b",
            help="read/write messages in buffered mode, terminated by CR/LF",
        ),
    ] = False,
    message: Annotated[
        str, typer.Option("--message", "-m", help="message to publish")
    ] = "",
    server: Annotated[
        str,
        typer.Option(
            "--server",
            "-S",
            envvar=SERVER_ENV_VAR,
            help="AMQP server URL(s), comma-separated",
        ),
    ] = DEFAULT_SERVER_URL,
    client_id: Annotated[
        str, typer.Option("--client_id", "--cid", "-c", help="Client ID")
    ] = DEFAULT_CLIENT_ID,
    cluster_id: Annotated[
        str, typer.Option("--cluster_id", help="Cluster ID")
    ] = DEFAULT_CLUSTER_ID,
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="verbose logging")
    ] = False,
    version: Annotated[
        Optional[bool],
        typer.Option(
            "--version",
            "-V",
            callback=_version_callback,
            is_eager=True,
            help="print the version",
        ),
    ] = None,
):
    """cat to/from a message bus subject"""
    setup_logging(verbose=verbose)

    try:
        config = resolve_config(
            subject,
            listen=listen,
            buffered=buffered,
            message=message,
            args=words,
            server_urls=server,
            cluster_id=cluster_id,
            client_id=client_id,
            verbose=verbose,
        )
    except ConfigError as e:
        typer.echo(ctx.get_help(), err=True)
        typer.echo(f"{SERVICE_NAME}: {e}", err=True)
        raise typer.Exit(code=1)

    service = CatService(config, connector=connect)
    if config.mode is Mode.LISTEN:
        _install_signal_handlers(service)

    try:
        service.run()
    except TransportError as e:
        typer.echo(f"{SERVICE_NAME}: {e}", err=True)
        raise typer.Exit(code=1)


def main():
    app(prog_name=SERVICE_NAME)


if __name__ == "__main__":
    main()
