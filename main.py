import subprocess
import sys
from typing import Optional

import typer

from config import database_file, settings
from database import initialize_database
from library import Library
from ui_helpers import print_list_result, set_output_mode

app = typer.Typer(help="Library API CLI")


@app.callback()
def _global_options(
    output: Optional[str] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output format: plain | json | rich (default: plain)",
    )
):
    """Global CLI options (e.g. output mode)."""
    if output:
        set_output_mode(output)


@app.command("list")
def cli_list():
    """List every book in the catalog."""
    lib = Library(database_file())
    print_list_result(lib.list_books())


@app.command("seed")
def cli_seed():
    """Create the schema and insert the sample books into an empty catalog."""
    inserted = initialize_database(database_file(), seed=True)
    if inserted:
        print(f"Seeded {inserted} sample books.")
    else:
        print("Catalog already has books; nothing seeded.")


@app.command("serve")
def cli_serve(reload: bool = typer.Option(False, "--reload", help="Restart the server on code changes")):
    """Run the HTTP API with uvicorn."""
    host = settings.api_host
    port = int(settings.api_port)
    print(f"Starting Library API on http://{host}:{port}/api")
    args = [
        sys.executable,
        "-m", "uvicorn",
        "api:app",
        "--host", host,
        "--port", str(port),
    ]
    if reload:
        args.append("--reload")
    subprocess.run(args)


def run() -> None:
    app()


if __name__ == "__main__":
    run()
