"""CLI entry point for layer-explorer."""

import logging
import sys
from typing import Optional, Tuple

import click

from . import __version__
from .core.types import DuplicatePolicy, ExplorerConfig
from .exceptions import ExplorerError
from .filesystem import cat_file, explore_filesystem
from .history import reconcile_history
from .layers import list_layers
from .models import Image
from .registry import resolve_image
from .utils.formatting import format_megabytes

LOG_LEVELS = {0: logging.WARNING, 1: logging.INFO}

layer_option = click.option(
    "--layer",
    "-l",
    "layer",
    type=click.IntRange(min=1),
    default=1,
    show_default=True,
    help="Layer number to explore (starting at 1).",
)


def _fail(exc: Exception) -> None:
    click.echo(f"Error: {exc}", err=True)
    sys.exit(1)


def _resolve(ctx: click.Context, image_ref: str) -> Image:
    config: ExplorerConfig = ctx.obj
    try:
        return resolve_image(image_ref, config)
    except ExplorerError as exc:
        _fail(exc)


@click.group()
@click.version_option(__version__)
@click.option("-v", "--verbose", count=True, help="Increase log verbosity (-v, -vv).")
@click.option("--platform", default=None, help="Platform to pick from multi-arch images (os/arch).")
@click.option(
    "--insecure",
    "insecure",
    multiple=True,
    help="Registry host reached over plain http (repeatable).",
)
@click.option("--timeout", type=int, default=None, help="Registry request timeout in seconds.")
@click.pass_context
def main(
    ctx: click.Context,
    verbose: int,
    platform: Optional[str],
    insecure: Tuple[str, ...],
    timeout: Optional[int],
) -> None:
    """Explore the layers, history and files of OCI/Docker images."""
    logging.basicConfig(
        level=LOG_LEVELS.get(verbose, logging.DEBUG),
        format="%(levelname)s %(name)s: %(message)s",
    )
    config = ExplorerConfig.from_env()
    if platform:
        config.platform = platform
    if insecure:
        config.insecure_registries = config.insecure_registries + insecure
    if timeout:
        config.timeout = timeout
    ctx.obj = config


@main.command("layers")
@click.argument("image_ref", metavar="IMAGE")
@click.option("--layer", "-l", "layer", type=click.IntRange(min=1), default=None, help="Only show this layer.")
@click.pass_context
def layers_command(ctx: click.Context, image_ref: str, layer: Optional[int]) -> None:
    """Show the layers of an image."""
    image = _resolve(ctx, image_ref)
    try:
        listing = list_layers(image, layer)
    except ExplorerError as exc:
        _fail(exc)

    click.echo(f"Image {image.name} contains {len(image.layers)} layers:")
    for summary in listing.layers:
        click.echo(f"  • Layer {summary.ordinal} : {summary.digest} ({format_megabytes(summary.size)})")
    click.echo(f"Total size (compressed): {format_megabytes(listing.total_size)}")


@main.command("history")
@click.argument("image_ref", metavar="IMAGE")
@click.option("--strict", is_flag=True, help="Fail when history and layers do not line up.")
@click.pass_context
def history_command(ctx: click.Context, image_ref: str, strict: bool) -> None:
    """Replay the build history of an image."""
    image = _resolve(ctx, image_ref)
    try:
        listing = reconcile_history(image, strict=strict or ctx.obj.strict_history)
    except ExplorerError as exc:
        _fail(exc)

    for step in listing.steps:
        marker = "•" if step.produced_layer else " "
        click.echo(f"[{step.ordinal:02d}] {marker} {step.command}")
        if step.layer is not None:
            click.echo(
                f"\t↳ Layer {step.layer.ordinal} {step.layer.digest} "
                f"({format_megabytes(step.layer.size)})"
            )
    click.echo(f"Total size (compressed): {format_megabytes(listing.total_size)}")


@main.command("fs")
@click.argument("image_ref", metavar="IMAGE")
@layer_option
@click.pass_context
def fs_command(ctx: click.Context, image_ref: str, layer: int) -> None:
    """Explore the filesystem of a specific layer of an image.

    \b
    Examples:
      layer-explorer fs alpine:latest --layer 2
      layer-explorer fs alpine:latest -l 2
    """
    image = _resolve(ctx, image_ref)
    try:
        listing = explore_filesystem(image, layer)
    except ExplorerError as exc:
        _fail(exc)

    click.echo(f"Content of layer #{layer} of {image.name}:")
    for row in listing.rows:
        click.echo(f"{row.mode:<10} {row.size:>8}  {row.path}")
    if not listing.rows:
        click.echo("(No files found in this layer)")


main.add_command(fs_command, "filesystem")


@main.command("cat")
@click.argument("image_ref", metavar="IMAGE")
@click.argument("path")
@layer_option
@click.option("--first-match", is_flag=True, help="Use the first occurrence of a duplicated path.")
@click.pass_context
def cat_command(ctx: click.Context, image_ref: str, path: str, layer: int, first_match: bool) -> None:
    """Print the exact content of a file stored in a layer.

    \b
    Examples:
      layer-explorer cat alpine:latest -l 1 /etc/os-release
    """
    image = _resolve(ctx, image_ref)
    policy = DuplicatePolicy.FIRST if first_match else ctx.obj.duplicate_policy
    sink = click.get_binary_stream("stdout")
    try:
        result = cat_file(image, layer, path, sink, policy=policy)
    except ExplorerError as exc:
        _fail(exc)
    sink.flush()
    click.echo(f"=== {result.path} (layer #{result.ordinal}, {result.size} bytes) ===", err=True)


if __name__ == "__main__":
    main()
