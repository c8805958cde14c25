"""Tests for history reconciliation."""

import logging

import pytest

from layer_explorer.exceptions import ReconciliationError
from layer_explorer.history import NO_COMMAND, reconcile_history
from tests.helpers import build_layer, make_image


def _blobs(count):
    return [build_layer([(f"layer{i}.txt", "file", b"x" * (i * 10))]) for i in range(1, count + 1)]


def test_empty_layer_records_consume_no_layer():
    """Record 2 is a no-op; records 1 and 3 get layers 1 and 2."""
    image = make_image(
        _blobs(2),
        [("/bin/sh -c one", False), ("/bin/sh -c #(nop)  ENV A=1", True), ("/bin/sh -c three", False)],
    )

    listing = reconcile_history(image)

    assert [s.produced_layer for s in listing.steps] == [True, False, True]
    assert listing.steps[0].layer.digest == image.layers[0].digest
    assert listing.steps[1].layer is None
    assert listing.steps[2].layer.digest == image.layers[1].digest
    assert listing.steps[2].layer.ordinal == 2
    assert listing.total_size == image.layers[0].size + image.layers[1].size
    assert listing.missing_layers == 0
    assert listing.unmatched_layers == 0


def test_commands_are_prettified():
    image = make_image(_blobs(1), [("/bin/sh -c a;b", False), ("", True)])

    listing = reconcile_history(image)

    assert listing.steps[0].command == "a;\n\tb"
    assert listing.steps[1].command == NO_COMMAND
    assert [s.ordinal for s in listing.steps] == [1, 2]


def test_fewer_layers_than_records_omits_detail(caplog):
    """Surplus records get no layer detail and the mismatch is logged."""
    image = make_image(_blobs(1), [("one", False), ("two", False)])

    with caplog.at_level(logging.WARNING, logger="layer_explorer.history"):
        listing = reconcile_history(image)

    assert listing.steps[0].layer is not None
    assert listing.steps[1].layer is None
    assert listing.steps[1].produced_layer is True
    assert listing.total_size == image.layers[0].size
    assert listing.missing_layers == 1
    assert "2 history records produce layers but the image has 1 layers" in caplog.text


def test_more_layers_than_records():
    image = make_image(_blobs(3), [("one", False)])

    listing = reconcile_history(image)

    assert listing.unmatched_layers == 2
    assert listing.total_size == image.layers[0].size


def test_strict_mode_rejects_mismatch():
    """In strict mode nothing is emitted for mismatched images."""
    image = make_image(_blobs(1), [("one", False), ("two", False)])

    with pytest.raises(ReconciliationError):
        reconcile_history(image, strict=True)


def test_strict_mode_accepts_consistent_image():
    image = make_image(_blobs(2), [("one", False), ("noop", True), ("two", False)])
    assert len(reconcile_history(image, strict=True).steps) == 3


def test_image_without_history():
    listing = reconcile_history(make_image([], []))
    assert listing.steps == []
    assert listing.total_size == 0
