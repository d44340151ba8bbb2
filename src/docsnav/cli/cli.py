"""CLI entrypoint: Typer app definition and command registration"""

import typer

from docsnav.cli.commands import (
    check_cmd, create_project_cmd, init_cmd, nav_cmd, repair_cmd, resolve_cmd, search_cmd,
)
from docsnav.config import load_config
from docsnav.core.utils.logging import setup_logging


app = typer.Typer(name="docsnav", no_args_is_help=True, help="Documentation navigation and content tooling")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level"),
    ):
    try:
        level = "DEBUG" if verbose else load_config().log_level
    except ValueError:
        level = "INFO"
    setup_logging(level)


app.command(name="init")(init_cmd)
app.command(name="create-project")(create_project_cmd)
app.command(name="nav")(nav_cmd)
app.command(name="resolve")(resolve_cmd)
app.command(name="search")(search_cmd)
app.command(name="check")(check_cmd)
app.command(name="repair")(repair_cmd)
