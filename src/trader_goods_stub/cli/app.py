import typer

from trader_goods_stub.cli.db import db_app
from trader_goods_stub.cli.schema import schema_app
from trader_goods_stub.cli.serve import serve

app = typer.Typer(
    name="tgp-stub",
    help="Trader goods profiles stub: serve the API, manage its database and check request schemas.",
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)

app.add_typer(db_app, name="db")
app.add_typer(schema_app, name="schema")
app.command("serve")(serve)


def main() -> None:
    app()
