"""
f8forge.cli - Command Line Interface
====================================

Typer front end for the f8forge commands. The CLI plays the host's part: it
loads a project object model snapshot, asks for the inputs the user did not
pass on the command line, runs a command and saves the snapshot back when
the command changed it.

Object model snapshots are JSON documents matching ``f8forge.models.PomModel``:

.. code-block:: json

    {"artifact_id": "demo", "packaging": "war", "properties": {}}

Architecture
------------
    app
    ├── infer      - Show the inferred deployment defaults
    ├── setup      - Fabric8/Docker setup
    ├── service    - Edit the Kubernetes service
    ├── site       - Maven site publishing
    ├── scan       - List Camel XML route files
    ├── endpoints  - List endpoints in Camel XML route files
    ├── new-xml    - Create a CamelContext XML file
    └── init-settings - Write an f8forge.toml with the defaults

``--yes`` skips every prompt and takes the inferred defaults, for scripts.

Usage Examples
--------------
    $ f8forge infer --model pom.json
    $ f8forge setup --model pom.json --icon camel --yes
    $ f8forge scan src/main/resources --exclude 'test/*'
"""

from __future__ import annotations

import fnmatch
import logging
from pathlib import Path
from typing import Annotated

import questionary
import typer
from pydantic import ValidationError
from rich import print as rprint
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from f8forge import __version__
from f8forge.camel import InclusionFilter, find_xml_files, scan_camel_files, scan_endpoints
from f8forge.commands import (
    CommandResult,
    Fabric8SetupOptions,
    ServiceOptions,
    fabric8_setup,
    new_camel_context_xml,
    service_setup,
    service_setup_defaults,
    site_setup,
)
from f8forge.facts import facts_from_pom
from f8forge.inference import (
    ICON_CHOICES,
    derive_container_label_from_image,
    infer_default_icon,
    infer_defaults,
)
from f8forge.models import PomModel
from f8forge.settings import SETTINGS_FILE_NAME, ForgeSettings, load_settings, write_settings


# =============================================================================
# CLI Application Setup
# =============================================================================

app = typer.Typer(
    name="f8forge",
    help="Fabric8 project setup: deployment defaults, POM edits and Camel route scanning.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

console = Console()

ModelOption = Annotated[
    Path,
    typer.Option(
        "--model",
        "-m",
        help="JSON snapshot of the project object model",
        exists=True,
        dir_okay=False,
    ),
]
SettingsOption = Annotated[
    Path | None,
    typer.Option(
        "--settings",
        help=f"Settings file (default: ./{SETTINGS_FILE_NAME} if present)",
    ),
]
YesOption = Annotated[
    bool,
    typer.Option("--yes", "-y", help="Skip prompts and accept defaults"),
]


def version_callback(value: bool) -> None:
    if value:
        console.print(f"[bold green]f8forge[/] version [cyan]{__version__}[/]")
        raise typer.Exit()


def configure_logging(verbose: bool) -> None:
    """Route log records through rich so warnings show up in the CLI."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_time=False, show_path=False)],
        force=True,
    )


# =============================================================================
# Snapshot and Settings Helpers
# =============================================================================

def load_model(path: Path) -> PomModel:
    """Read a ``PomModel`` JSON snapshot, exiting with a message if invalid."""
    try:
        return PomModel.model_validate_json(path.read_text(encoding="utf-8"))
    except ValidationError as e:
        rprint(f"[red]Error:[/] Invalid project model {path}")
        rprint(f"[dim]{escape(str(e))}[/]")
        raise typer.Exit(1)


def save_model(path: Path, pom: PomModel) -> None:
    path.write_text(pom.model_dump_json(indent=2, exclude_none=True) + "\n", encoding="utf-8")


def _load_settings(path: Path | None) -> ForgeSettings:
    try:
        return load_settings(path)
    except (FileNotFoundError, ValidationError) as e:
        rprint(f"[red]Error:[/] {escape(str(e))}")
        raise typer.Exit(1)


def report(result: CommandResult, model_path: Path | None = None, pom: PomModel | None = None) -> None:
    """Print a command result, persisting the model if it changed."""
    if not result.success:
        rprint(f"[red]Error:[/] {escape(result.message)}")
        raise typer.Exit(1)

    if result.changed and model_path is not None and pom is not None:
        save_model(model_path, pom)

    console.print(Panel(
        result.message,
        title="[bold]Success[/]",
        border_style="green" if result.changed else "dim",
    ))


def exclusion_filter(patterns: list[str] | None) -> InclusionFilter | None:
    """Deny paths matching any glob; no opinion on everything else."""
    if not patterns:
        return None

    def _filter(path: str) -> bool | None:
        if any(fnmatch.fnmatch(path, p) for p in patterns):
            return False
        return None

    return _filter


def _ask(question: questionary.Question) -> str:
    answer = question.ask()
    if answer is None:
        raise typer.Abort()
    return answer


# =============================================================================
# Main Application Callback
# =============================================================================

@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show debug logging."),
    ] = False,
) -> None:
    """
    [bold]f8forge[/] - Fabric8 project setup.

    Infers Docker/Kubernetes defaults from a Maven project model, applies
    them idempotently and works with Camel XML routes.
    """
    configure_logging(verbose)


# =============================================================================
# Inference
# =============================================================================

@app.command()
def infer(model: ModelOption, settings_path: SettingsOption = None) -> None:
    """Show the deployment defaults inferred for a project."""
    pom = load_model(model)
    defaults = infer_defaults(facts_from_pom(pom), _load_settings(settings_path))

    table = Table(title=f"Defaults for {pom.artifact_id}", show_header=True)
    table.add_column("Setting", style="cyan")
    table.add_column("Default")
    table.add_row("Service port", defaults.default_service_port or "[dim]none[/]")
    table.add_row("Icon", defaults.default_icon)
    table.add_row("Main class", defaults.default_main_class or "[dim]none[/]")
    table.add_row("Container label", defaults.default_container_name or "[dim]none[/]")
    table.add_row(
        "Base images",
        "\n".join(defaults.default_base_image_choices) or "[dim]none[/]",
    )
    console.print(table)


# =============================================================================
# Setup Commands
# =============================================================================

@app.command()
def setup(
    model: ModelOption,
    from_image: Annotated[
        str | None,
        typer.Option("--from", "-f", help="Docker base image"),
    ] = None,
    organization: Annotated[
        str | None,
        typer.Option("--organization", "-o", help="Docker organization"),
    ] = None,
    main_class: Annotated[
        str | None,
        typer.Option("--main", help="Main class for Java standalone images"),
    ] = None,
    container: Annotated[
        str | None,
        typer.Option("--container", help="Container label"),
    ] = None,
    group: Annotated[
        str | None,
        typer.Option("--group", help="Group label"),
    ] = None,
    icon: Annotated[
        str | None,
        typer.Option("--icon", help=f"Icon: {', '.join(ICON_CHOICES)}"),
    ] = None,
    service: Annotated[
        bool,
        typer.Option("--service/--no-service", help="Create Kubernetes service if applicable"),
    ] = True,
    readiness_probe: Annotated[
        bool,
        typer.Option(
            "--readiness-probe/--no-readiness-probe",
            help="Create Kubernetes readiness probe if applicable",
        ),
    ] = True,
    profiles: Annotated[
        bool,
        typer.Option("--profiles/--no-profiles", help="Add the f8-* Maven profiles"),
    ] = True,
    bom: Annotated[
        bool,
        typer.Option("--bom", help="Import the fabric8-project BOM"),
    ] = False,
    settings_path: SettingsOption = None,
    yes: YesOption = False,
) -> None:
    """
    Configure the Fabric8 and Docker options for the project.

    [bold]Examples:[/]

        f8forge setup --model pom.json
        f8forge setup --model pom.json --from fabric8/s2i-java:1.2 --icon camel --yes
    """
    pom = load_model(model)
    settings = _load_settings(settings_path)
    facts = facts_from_pom(pom)
    defaults = infer_defaults(facts, settings)

    if not yes:
        choices = list(defaults.default_base_image_choices)
        if from_image is None and choices:
            from_image = _ask(questionary.select(
                "Docker image to use as base line?",
                choices=choices,
                default=choices[0],
            ))
        if icon is None:
            if container is None and from_image:
                container = derive_container_label_from_image(from_image)
            icon = _ask(questionary.select(
                "Icon?",
                choices=list(ICON_CHOICES),
                default=infer_default_icon(facts, container),
            ))

    try:
        options = Fabric8SetupOptions(
            organization=organization,
            from_image=from_image,
            main=main_class,
            container=container,
            group=group,
            icon=icon,
            service=service,
            readiness_probe=readiness_probe,
            profiles=profiles,
            import_bom=bom,
        )
    except ValidationError as e:
        for error in e.errors():
            rprint(f"[red]Error:[/] {escape(error['msg'])}")
        raise typer.Exit(1)

    report(fabric8_setup(pom, options, settings), model, pom)


@app.command()
def service(
    model: ModelOption,
    name: Annotated[
        str | None,
        typer.Option("--name", "-n", help="Service name (max 24 characters)"),
    ] = None,
    port: Annotated[
        int | None,
        typer.Option("--port", "-p", help="Service port (outside)"),
    ] = None,
    container_port: Annotated[
        int | None,
        typer.Option("--container-port", "-c", help="Port used by the container (inside)"),
    ] = None,
    yes: YesOption = False,
) -> None:
    """Add or update the Kubernetes service."""
    pom = load_model(model)

    if not yes:
        current = service_setup_defaults(pom)
        if name is None:
            name = _ask(questionary.text("Service name?", default=current.name or "")) or None
        if port is None:
            answer = _ask(questionary.text(
                "Service port?",
                default="" if current.port is None else str(current.port),
            ))
            port = int(answer) if answer.strip().isdigit() else None
        if container_port is None:
            answer = _ask(questionary.text(
                "Container port?",
                default="" if current.container_port is None else str(current.container_port),
            ))
            container_port = int(answer) if answer.strip().isdigit() else None

    try:
        options = ServiceOptions(name=name, port=port, container_port=container_port)
    except ValidationError as e:
        for error in e.errors():
            field = ".".join(str(loc) for loc in error["loc"])
            rprint(f"[red]Error:[/] {field}: {escape(error['msg'])}")
        raise typer.Exit(1)

    report(service_setup(pom, options), model, pom)


@app.command()
def site(model: ModelOption, settings_path: SettingsOption = None) -> None:
    """Configure publishing of the Maven site over WebDAV."""
    pom = load_model(model)
    report(site_setup(pom, _load_settings(settings_path)), model, pom)


# =============================================================================
# Camel Commands
# =============================================================================

@app.command()
def scan(
    resources: Annotated[
        Path,
        typer.Argument(help="Resource directory to scan", exists=True, file_okay=False),
    ],
    exclude: Annotated[
        list[str] | None,
        typer.Option("--exclude", "-x", help="Glob of paths to skip (repeatable)"),
    ] = None,
) -> None:
    """List the Camel XML route files below a resource directory."""
    files = scan_camel_files(find_xml_files(resources), resources, exclusion_filter(exclude))
    if not files:
        console.print("[dim]No Camel XML files found[/]")
        return
    for file in files:
        console.print(file)


@app.command()
def endpoints(
    resources: Annotated[
        Path,
        typer.Argument(help="Resource directory to scan", exists=True, file_okay=False),
    ],
    exclude: Annotated[
        list[str] | None,
        typer.Option("--exclude", "-x", help="Glob of paths to skip (repeatable)"),
    ] = None,
) -> None:
    """List the endpoints used in Camel XML route files."""
    found = scan_endpoints(find_xml_files(resources), resources, exclusion_filter(exclude))

    table = Table(title="Camel Endpoints", show_header=True)
    table.add_column("File", style="cyan")
    table.add_column("Line", justify="right")
    table.add_column("Id")
    table.add_column("URI")
    for detail in found:
        table.add_row(
            detail.file_uri,
            "" if detail.line_number is None else str(detail.line_number),
            detail.endpoint_instance_name or "",
            detail.endpoint_uri,
        )
    console.print(table)


@app.command("new-xml")
def new_xml(
    model: ModelOption,
    name: Annotated[str, typer.Argument(help="Name of the XML file")],
    resources: Annotated[
        Path,
        typer.Option("--resources", "-r", help="Resource directory", file_okay=False),
    ] = Path("src/main/resources"),
    directory: Annotated[
        str | None,
        typer.Option("--directory", "-d", help="Directory below the resources"),
    ] = None,
    project_name: Annotated[
        str | None,
        typer.Option("--project-name", help="Name used as CamelContext id"),
    ] = None,
) -> None:
    """Create a new XML file with a CamelContext."""
    pom = load_model(model)
    result = new_camel_context_xml(
        pom,
        resources,
        name,
        directory=directory,
        project_name=project_name,
    )
    report(result, model, pom)


# =============================================================================
# Settings
# =============================================================================

@app.command("init-settings")
def init_settings(
    path: Annotated[
        Path,
        typer.Argument(help="Settings file to write"),
    ] = Path(SETTINGS_FILE_NAME),
) -> None:
    """Write a settings file with every default filled in."""
    written = write_settings(path)
    console.print(f"Wrote {written}")


if __name__ == "__main__":
    app()
