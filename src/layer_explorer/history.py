"""Reconciliation of build history with real layers."""

import logging

from .commands import prettify_command
from .exceptions import ReconciliationError
from .layers import summarize
from .models import HistoryListing, HistoryStep, Image

logger = logging.getLogger(__name__)

NO_COMMAND = "(no command)"


def reconcile_history(image: Image, strict: bool = False) -> HistoryListing:
    """Pair every history record with the layer it produced, if any.

    Records flagged as empty layers consume no layer; every other record
    takes the next real layer in order. When the counts disagree, the
    surplus records get no layer detail (or, with strict, nothing is
    emitted and ReconciliationError is raised).

    Args:
        image: Resolved image
        strict: Refuse to reconcile mismatched history and layers

    Returns:
        HistoryListing with the total compressed size of matched layers

    Raises:
        ReconciliationError: In strict mode, if the counts differ
    """
    producing = sum(1 for record in image.history if not record.empty_layer)
    available = len(image.layers)
    if producing != available:
        message = (
            f"{producing} history records produce layers "
            f"but the image has {available} layers"
        )
        if strict:
            raise ReconciliationError(message)
        logger.warning("%s; layer details may be incomplete", message)

    steps = []
    total_size = 0
    cursor = 0
    for ordinal, record in enumerate(image.history, start=1):
        command = prettify_command(record.created_by) or NO_COMMAND
        step = HistoryStep(
            ordinal=ordinal,
            produced_layer=not record.empty_layer,
            command=command,
        )
        if not record.empty_layer:
            if cursor < available:
                step.layer = summarize(image.layers[cursor])
                total_size += step.layer.size
            cursor += 1
        steps.append(step)

    return HistoryListing(
        steps=steps,
        total_size=total_size,
        missing_layers=max(producing - available, 0),
        unmatched_layers=max(available - producing, 0),
    )
