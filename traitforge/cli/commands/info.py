"""Info command: collection details and feasibility."""

from pathlib import Path

import typer

from ...combinations import collection_details, provider_for_spec
from ...config import get_config
from ...core.models import CollectionSpec
from ..app import app, console, get_json_mode
from ..utils import Output, ExitCode


def load_collection(path: Path, out: Output) -> CollectionSpec:
    """Load a collection spec or exit with a reported error."""
    if not path.exists():
        out.error(f"File not found: {path}", exit_code=ExitCode.FILE_NOT_FOUND)
        raise typer.Exit(out.finish())
    try:
        return CollectionSpec.from_yaml(path)
    except Exception as e:
        out.error(
            f"Failed to load collection spec: {e}",
            exit_code=ExitCode.VALIDATION_ERROR,
        )
        raise typer.Exit(out.finish())


@app.command("info")
def info_command(
    collection: Path = typer.Argument(..., help="Collection spec YAML file"),
):
    """
    Show collection details: layers, option counts and possible combinations.

    The traits folder is resolved relative to the collection file.

    EXIT CODES:
        0 = Success (collection is feasible)
        1 = Validation error
        3 = File not found
        4 = Requested count exceeds possible combinations

    Examples:
        traitforge info collection.yaml
        traitforge --json info collection.yaml
    """
    out = Output(console=console, json_mode=get_json_mode())
    spec = load_collection(collection, out)
    config = get_config()

    provider = provider_for_spec(
        spec,
        base_dir=collection.parent,
        cache=config.generation.cache_candidates,
    )
    details = collection_details(
        spec,
        provider,
        weight_delimiter=config.format.weight_delimiter,
        extension_delimiter=config.format.extension_delimiter,
    )

    out.success(
        f"Loaded collection: [bold]{details.name}[/bold]",
        name=details.name,
        count=details.count,
        start_at=details.start_at,
        traits_folder=details.traits_folder,
        total_combinations=details.total_combinations,
        drawable_combinations=details.drawable_combinations,
    )
    out.table(
        "Collection Details",
        ["Field", "Value"],
        [
            ["Collection Name", details.name],
            ["Collection Size", str(details.count)],
            ["Starting Index", str(details.start_at)],
            ["Traits Folder", details.traits_folder],
            ["Number of Layers", str(len(details.layers))],
        ],
        data_key="details",
    )
    out.table(
        "Layers",
        ["Layer", "Options"],
        [[layer.layer, str(layer.option_count)] for layer in details.layers],
        data_key="layers",
    )
    out.text(f"Total possible combinations: [bold]{details.total_combinations}[/bold]")

    for layer in details.layers:
        if layer.zero_weight_options and len(layer.zero_weight_options) < layer.option_count:
            out.warning(
                f"Layer '{layer.layer}' has zero-weight options that are never drawn: "
                f"{', '.join(layer.zero_weight_options)}",
                suggestion=f"Only {details.drawable_combinations} combinations can be generated",
            )

    empty = [layer.layer for layer in details.layers if layer.option_count == 0]
    if empty:
        out.error(
            f"Layers with no trait options: {', '.join(empty)}",
            exit_code=ExitCode.GENERATION_ERROR,
        )
    elif not details.feasible:
        out.error(
            f"Requested number of items ({details.count}) exceeds the total "
            f"possible combinations ({details.drawable_combinations})",
            exit_code=ExitCode.GENERATION_ERROR,
            suggestion="Lower the count or add trait options",
        )

    raise typer.Exit(out.finish())
