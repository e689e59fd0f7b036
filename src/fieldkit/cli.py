"""fieldkit CLI.

Inspects model directories and the built-in field templates.
"""

import json
import sys
from pathlib import Path
from typing import Any, Optional

import structlog
import typer

from fieldkit.errors import FieldKitError
from fieldkit.models.config import ContainerConfig
from fieldkit.models.descriptor import FieldDescriptor
from fieldkit.services.container import FieldContainer
from fieldkit.services.registry import default_registry

structlog.configure(
    processors=[
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.dev.ConsoleRenderer(),
    ],
    logger_factory=lambda name: structlog.PrintLogger(file=sys.stderr),
    wrapper_class=structlog.BoundLogger,
    context_class=dict,
    # resolve sys.stderr per call; it is swapped by CliRunner and by pytest capture
    cache_logger_on_first_use=False,
)

logger = structlog.get_logger(__name__)

app = typer.Typer(
    name="fieldkit",
    help="""Inspect field descriptors declared with fieldkit.

Examples:

  # List the models found in a directory of *_model.py files
  fieldkit models ./models/

  # Show the attributes of one model as JSON
  fieldkit describe ./models/ book

  # List the built-in field templates
  fieldkit templates""",
    rich_markup_mode="markdown",
)


def describe_descriptor(descriptor: FieldDescriptor) -> dict[str, Any]:
    """Return a JSON-friendly summary of a descriptor."""
    summary: dict[str, Any] = {
        "kind": str(descriptor.kind),
        "column": descriptor.field_name,
        "type": repr(descriptor.sa_type),
        "primary_key": descriptor.primary_key,
        "auto_increment": descriptor.auto_increment,
        "allow_null": descriptor.allow_null,
        "default": descriptor.default_value,
        "comment": descriptor.comment,
        "example": descriptor.example,
    }
    if descriptor.validation is None:
        summary["validation"] = None
    else:
        summary["validation"] = {
            rule: repr(argument) if callable(argument) else argument
            for rule, argument in descriptor.validation.items()
        }
    return {key: value for key, value in summary.items() if value is not None or key == "validation"}


def _load_container(directory: str, suffix: str, underscored: bool, schema: Optional[str]) -> FieldContainer:
    container = FieldContainer(ContainerConfig(underscored=underscored, schema_name=schema), logger=logger)
    try:
        container.import_path(Path(directory), suffix=suffix)
    except (FieldKitError, FileNotFoundError, NotADirectoryError) as err:
        logger.error("model_import_failed", directory=directory, error=str(err))
        raise typer.Exit(1) from err
    return container


@app.command()
def models(
    directory: str = typer.Argument(
        ...,
        help="Directory containing model files",
    ),
    suffix: str = typer.Option(
        "_model.py",
        "--suffix",
        "-s",
        help="File name suffix of model files",
    ),
    underscored: bool = typer.Option(
        True,
        "--underscored/--no-underscored",
        help="Derive snake_case column names from attribute names",
    ),
    schema: Optional[str] = typer.Option(
        None,
        "--schema",
        help="Database schema for the generated tables",
    ),
) -> None:
    """List the models defined in a directory."""
    container = _load_container(directory, suffix, underscored, schema)
    if not len(container):
        typer.echo("No models found.")
        return
    for name, model in sorted(container.models.items()):
        typer.echo(f"{name}: {', '.join(model.attributes)}")
        for association in model.associations.values():
            arity = "many" if association.many else "one"
            typer.echo(f"  {association.name} -> {association.target} ({arity})")


@app.command()
def describe(
    directory: str = typer.Argument(
        ...,
        help="Directory containing model files",
    ),
    model: str = typer.Argument(
        ...,
        help="Name of the model to describe",
    ),
    suffix: str = typer.Option(
        "_model.py",
        "--suffix",
        "-s",
        help="File name suffix of model files",
    ),
    underscored: bool = typer.Option(
        True,
        "--underscored/--no-underscored",
        help="Derive snake_case column names from attribute names",
    ),
    schema: Optional[str] = typer.Option(
        None,
        "--schema",
        help="Database schema for the generated tables",
    ),
) -> None:
    """Print the attributes of a model as JSON."""
    container = _load_container(directory, suffix, underscored, schema)
    if model not in container:
        logger.error("model_not_found", model=model, available=sorted(container.models))
        typer.echo(f"Unknown model '{model}'.")
        raise typer.Exit(1)

    definition = container.models[model]
    payload = {
        "model": model,
        "attributes": {name: describe_descriptor(field) for name, field in definition.attributes.items()},
        "associations": {
            name: {"target": association.target, "many": association.many}
            for name, association in definition.associations.items()
        },
    }
    typer.echo(json.dumps(payload, indent=2, default=str))


@app.command()
def templates() -> None:
    """List the built-in field templates."""
    for name in default_registry.names():
        template = default_registry.get(name)
        comment = f"  {template.comment}" if template.comment else ""
        typer.echo(f"{name:<24}{template.kind}{comment}")


@app.command()
def version() -> None:
    """Show version information."""
    from fieldkit import __version__

    typer.echo(f"fieldkit {__version__}")
