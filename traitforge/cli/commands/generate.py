"""Generate command: pick unique combinations and write metadata records."""

import time
from pathlib import Path

import typer

from ...combinations import (
    BUDGET_BASES,
    GenerationError,
    generate_collection,
    provider_for_spec,
    save_json,
)
from ...config import get_config
from ...metadata import write_metadata
from ..app import app, console, get_json_mode
from ..utils import (
    Output,
    ExitCode,
    format_elapsed,
    format_generation_stats_for_json,
    setup_logging,
)
from .info import load_collection


@app.command("generate")
def generate_command(
    collection: Path = typer.Argument(..., help="Collection spec YAML file"),
    output: Path | None = typer.Option(
        None, "--output", "-o", help="Output folder (defaults to config defaults.output_folder)"
    ),
    count: int | None = typer.Option(
        None, "--count", "-n", help="Override the collection's item count"
    ),
    seed: int | None = typer.Option(
        None, "--seed", help="Random seed for reproducibility"
    ),
    max_attempts: int | None = typer.Option(
        None, "--max-attempts", help="Consecutive rejected draws tolerated per item"
    ),
    basis: str | None = typer.Option(
        None, "--basis", help="Rarity quota basis: pool or absolute"
    ),
    report: bool = typer.Option(
        False, "--report", "-r", help="Show per-layer trait counts"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show info logs"),
    debug: bool = typer.Option(False, "--debug", help="Show debug logs"),
):
    """
    Generate unique trait combinations and write one metadata JSON per item.

    Writes <index>.json for every item plus combinations.json with the full
    run (seed, stats) to the output folder. Rendering the images is left to
    downstream tools.

    EXIT CODES:
        0 = Success
        1 = Validation error
        3 = File not found
        4 = Generation error (infeasible collection)

    Examples:
        traitforge generate collection.yaml
        traitforge generate collection.yaml -o out --seed 42 --report
        traitforge generate collection.yaml --basis absolute
    """
    json_mode = get_json_mode()
    out = Output(console=console, json_mode=json_mode)
    setup_logging(console, verbose=verbose, debug=debug)
    config = get_config()
    start_time = time.time()

    spec = load_collection(collection, out)
    if count is not None:
        if count <= 0:
            out.error(f"--count must be positive, got {count}")
            raise typer.Exit(out.finish())
        spec = spec.model_copy(update={"count": count})
    if max_attempts is not None and max_attempts <= 0:
        out.error(f"--max-attempts must be positive, got {max_attempts}")
        raise typer.Exit(out.finish())
    if max_attempts is None:
        max_attempts = config.generation.max_attempts

    basis = basis or config.generation.budget_basis
    if basis not in BUDGET_BASES:
        out.error(
            f"Unknown basis: {basis}",
            suggestion=f"Use one of: {', '.join(BUDGET_BASES)}",
        )
        raise typer.Exit(out.finish())

    output_dir = output or Path(config.defaults.output_folder)
    if config.defaults.image_extension and "image_extension" not in spec.model_fields_set:
        spec = spec.model_copy(update={"image_extension": config.defaults.image_extension})

    out.success(
        f"Loaded collection: [bold]{spec.meta.name}[/bold] "
        f"({spec.count} items, {len(spec.layers)} layers)",
        collection=spec.meta.name,
        count=spec.count,
        layers=spec.layers,
    )

    provider = provider_for_spec(
        spec,
        base_dir=collection.parent,
        cache=config.generation.cache_candidates,
    )
    fmt = config.format
    kwargs = dict(
        provider=provider,
        seed=seed,
        max_attempts=max_attempts,
        basis=basis,
        key_separator=fmt.key_separator,
        weight_delimiter=fmt.weight_delimiter,
        extension_delimiter=fmt.extension_delimiter,
    )

    result = None
    generation_error = None
    if not json_mode:
        from rich.progress import (
            Progress,
            SpinnerColumn,
            TextColumn,
            BarColumn,
            TaskProgressColumn,
        )

        with Progress(
            SpinnerColumn(),
            TextColumn("[cyan]Generating combinations...[/cyan]"),
            BarColumn(),
            TaskProgressColumn(),
            console=console,
            transient=True,
        ) as progress:
            task = progress.add_task("Generating", total=spec.count)

            def on_progress(current: int, total: int):
                progress.update(task, completed=current)

            try:
                result = generate_collection(spec, on_progress=on_progress, **kwargs)
            except GenerationError as e:
                generation_error = e
    else:
        try:
            result = generate_collection(spec, **kwargs)
        except GenerationError as e:
            generation_error = e

    if generation_error:
        out.error(
            f"Generation failed: {generation_error}",
            exit_code=ExitCode.GENERATION_ERROR,
            suggestion="Lower the count, add trait options or relax rarity weights",
        )
        raise typer.Exit(out.finish())

    out.success(
        f"Generated {len(result.combinations)} combinations "
        f"({result.stats.attempts} draws, seed={result.meta['seed']})",
        generated_count=len(result.combinations),
        seed=result.meta["seed"],
    )

    paths = write_metadata(
        result,
        spec,
        output_dir,
        weight_delimiter=fmt.weight_delimiter,
        extension_delimiter=fmt.extension_delimiter,
    )
    manifest_path = output_dir / "combinations.json"
    save_json(result, manifest_path)

    out.set_data("output_folder", str(output_dir))
    out.set_data("metadata_files", len(paths))
    out.set_data("manifest", str(manifest_path))
    out.set_data(
        "stats", format_generation_stats_for_json(result.stats, spec.count)
    )

    if report and not json_mode:
        _show_generation_report(out, result, spec.count)

    elapsed = time.time() - start_time
    out.divider()
    out.success(
        f"Wrote {len(paths)} metadata files and [bold]{manifest_path}[/bold]"
    )
    out.text(f"[dim]Total time: {format_elapsed(elapsed)}[/dim]")
    out.divider()

    raise typer.Exit(out.finish())


def _show_generation_report(out: Output, result, target_count: int) -> None:
    """Per-layer trait counts and rejection stats."""
    stats = result.stats
    out.blank()
    for layer, counts in stats.option_counts.items():
        rows = [
            [option, str(n), f"{n / target_count:.1%}"]
            for option, n in sorted(counts.items(), key=lambda x: -x[1])
        ]
        out.table(f"Layer: {layer}", ["Option", "Count", "Share"], rows)
    out.text(
        f"Draws: {stats.attempts}  duplicates rejected: {stats.duplicate_rejections}  "
        f"over budget: {stats.budget_rejections}"
    )
    for layer, options in stats.exclusions.items():
        out.text(f"[dim]Exhausted in {layer}: {', '.join(options)}[/dim]")
