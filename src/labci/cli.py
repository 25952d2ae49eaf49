# cli.py
from __future__ import annotations

import sys
from pathlib import Path

import click

from labci.assembler import generate
from labci.errors import GenerationError
from labci.loader import load_matrix
from labci.model import Pipeline
from labci.serialize import dumps
from labci.settings import Settings
from labci.ui.console import Console, get_console, set_console


def load_pipeline(matrix_path: str | None) -> tuple[Pipeline, str]:
    """
    Generate the pipeline from a matrix file, or from the built-in matrix.

    Returns:
        (pipeline, description of where the matrix came from)
    """
    console = get_console()
    settings = Settings.from_env()
    console.print_debug(f"settings: {settings}")

    if matrix_path is None:
        return generate(settings=settings), "built-in"

    loaded = load_matrix(matrix_path)
    console.print_debug(f"loaded {len(loaded.matrices)} matrices from {loaded.path}")
    pipeline = generate(registry=loaded.registry, matrices=loaded.matrices, settings=settings)
    return pipeline, str(loaded.path)


def _run(ctx, matrix_path: str | None) -> tuple[Pipeline, str]:
    """Generate, turning every failure into a console error and exit code 1."""
    console = get_console()
    try:
        return load_pipeline(matrix_path)
    except GenerationError as e:
        console.print_error(
            "Pipeline generation failed",
            f"{e.kind}: {e.message}",
            details=[f"{k}={v}" for k, v in e.details.items()],
        )
        _print_traceback(ctx)
    except (FileNotFoundError, TypeError, ValueError) as e:
        console.print_error(
            "Failed to load matrix",
            f"Could not load matrix from {matrix_path}",
            details=[str(e)],
            suggestion="A matrix file defines matrices() -> List[Matrix] or MATRIX = [Matrix, ...]",
        )
        _print_traceback(ctx)
    except Exception as e:
        console.print_exception(e)
    sys.exit(1)


def _print_traceback(ctx) -> None:
    # only meaningful while an exception is being handled
    if ctx.obj.get("debug", False):
        import traceback
        traceback.print_exc()


_matrix_option = click.option(
    "--matrix",
    "matrix_path",
    default=None,
    envvar="LABCI_MATRIX",
    help="Matrix file path (defaults to the built-in labsjdk matrix)",
)


@click.group()
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Enable debug mode (show stack traces and detailed output)",
)
@click.pass_context
def cli(ctx, debug):
    """labci: CI matrix and pipeline generator for labs JDK builds."""
    console = Console(debug=debug)
    set_console(console)
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug


@cli.command("generate")
@_matrix_option
@click.option("--output", "-o", default=None, type=click.Path(dir_okay=False), help="Write the descriptor to a file")
@click.option("--compact", is_flag=True, default=False, help="Emit single-line JSON")
@click.pass_context
def generate_cmd(ctx, matrix_path, output, compact):
    """Print the pipeline descriptor as JSON."""
    pipeline, _source = _run(ctx, matrix_path)
    text = dumps(pipeline, indent=None if compact else 2)

    if output is None:
        click.echo(text, nl=False)
        return

    Path(output).write_text(text, encoding="utf-8")
    get_console().print_info(f"Wrote {len(pipeline.jobs)} job(s) to {output}")


@cli.command()
@_matrix_option
@click.pass_context
def check(ctx, matrix_path):
    """Validate the matrix: composition, artifacts and dependency graph."""
    pipeline, source = _run(ctx, matrix_path)
    get_console().print_summary(pipeline, source)


@cli.command()
@_matrix_option
@click.option("--blocked-by", default=None, help="Show the jobs skipped if this job fails")
@click.pass_context
def plan(ctx, matrix_path, blocked_by):
    """Print the stages the CI engine can run in parallel."""
    console = get_console()
    pipeline, _source = _run(ctx, matrix_path)

    if blocked_by is not None:
        try:
            skipped = pipeline.transitive_dependents(blocked_by)
        except KeyError:
            console.print_error("Unknown job", f"No job named {blocked_by!r}")
            sys.exit(1)
        console.print_header(f"Skipped if {blocked_by} fails")
        for name in skipped:
            console.print_info(f"  {name}")
        return

    for index, stage in enumerate(pipeline.stages()):
        console.print_plan_stage(index, stage)
        for name in stage:
            console.print_plan_job(name, pipeline.dependencies_of(name))


if __name__ == "__main__":
    cli()
