"""Layer listing and ordinal selection."""

from typing import Optional

from .exceptions import LayerOutOfRangeError
from .models import Image, LayerHandle, LayerListing, LayerSummary


def select_layer(image: Image, ordinal: int) -> LayerHandle:
    """Return the layer at a 1-based ordinal.

    Raises:
        LayerOutOfRangeError: If the ordinal is outside 1..N
    """
    if ordinal < 1 or ordinal > len(image.layers):
        raise LayerOutOfRangeError(ordinal, len(image.layers))
    return image.layers[ordinal - 1]


def summarize(layer: LayerHandle) -> LayerSummary:
    return LayerSummary(ordinal=layer.index, digest=layer.digest, size=layer.size)


def list_layers(image: Image, ordinal: Optional[int] = None) -> LayerListing:
    """Summarize layers in order, with their total compressed size.

    Args:
        image: Resolved image
        ordinal: Only report this layer when given

    Raises:
        LayerOutOfRangeError: If ordinal is outside 1..N
    """
    if ordinal is not None:
        layers = [select_layer(image, ordinal)]
    else:
        layers = image.layers

    summaries = [summarize(layer) for layer in layers]
    return LayerListing(layers=summaries, total_size=sum(s.size for s in summaries))
