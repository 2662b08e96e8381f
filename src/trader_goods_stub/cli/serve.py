import logging
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler

from trader_goods_stub.config import get_settings

console = Console()


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
        force=True,
    )


def serve(
    host: Annotated[str, typer.Option(help="Interface to bind.")] = "127.0.0.1",
    port: Annotated[int, typer.Option(help="Port to listen on.")] = 8000,
    store: Annotated[str | None, typer.Option(help="Record store backend: memory or postgres.")] = None,
) -> None:
    """Start the stub API server."""
    import uvicorn

    from trader_goods_stub.api.app import create_app

    settings = get_settings()
    if store is not None:
        if store not in ("memory", "postgres"):
            console.print(f"[red]Unknown store backend {store!r}; use memory or postgres.[/red]")
            raise typer.Exit(2)
        settings = settings.model_copy(update={"store_backend": store})
    configure_logging(settings.log_level)

    app = create_app(settings)
    console.print(f"[green]Starting API server on {host}:{port} ({settings.store_backend} store)[/green]")
    uvicorn.run(app, host=host, port=port, log_config=None)
