"""
Command line entry point: ``settings-sync``.
"""

import logging

import typer

from settings_sync.commands import gist_cmd


app = typer.Typer(help="Synchronize editor settings files with a GitHub Gist")
app.add_typer(gist_cmd.app, name="gist")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


if __name__ == "__main__":
    app()
