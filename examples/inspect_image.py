"""Example usage of the layer-explorer library API."""

import io
import logging
import sys

# Add parent directory to path
sys.path.insert(0, "src")

from layer_explorer import (
    ExplorerConfig,
    ExplorerError,
    cat_file,
    explore_filesystem,
    list_layers,
    reconcile_history,
    resolve_image,
)
from layer_explorer.utils import format_megabytes

# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def main(reference: str = "alpine:latest") -> None:
    """Resolve an image and walk through its layers."""
    config = ExplorerConfig.from_env()

    try:
        image = resolve_image(reference, config)

        listing = list_layers(image)
        logger.info(f"{image.name}: {len(listing.layers)} layers, {format_megabytes(listing.total_size)}")

        for step in reconcile_history(image).steps:
            logger.info(f"[{step.ordinal:02d}] {step.command.splitlines()[0]}")

        rows = explore_filesystem(image, 1).rows
        logger.info(f"Layer 1 holds {len(rows)} entries")

        sink = io.BytesIO()
        cat_file(image, 1, "/etc/os-release", sink)
        logger.info(sink.getvalue().decode("utf-8", errors="replace"))

    except ExplorerError as e:
        logger.error(f"Explorer error: {e}")


if __name__ == "__main__":
    main(*sys.argv[1:2])
