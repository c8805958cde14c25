"""Test helpers for building synthetic layers and images."""

import gzip
import io
import json
import tarfile
from typing import Iterable, List, Optional, Tuple

from layer_explorer.models import HistoryRecord, Image, LayerHandle
from layer_explorer.utils.digest import calculate_digest

OS_RELEASE = b'NAME="Alpine Linux"\nID=alpine\nVERSION_ID=3.20.0\n'

# (name, type, payload) where type is "file", "dir", "symlink" or "hardlink";
# payload is the file content or link target.
Entry = Tuple[str, str, object]


def build_layer(entries: Iterable[Entry]) -> bytes:
    """Create an uncompressed tar layer in memory."""
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w", format=tarfile.GNU_FORMAT) as tar:
        for name, kind, payload in entries:
            info = tarfile.TarInfo(name)
            if kind == "dir":
                info.type = tarfile.DIRTYPE
                info.mode = 0o755
                tar.addfile(info)
            elif kind == "symlink":
                info.type = tarfile.SYMTYPE
                info.mode = 0o777
                info.linkname = str(payload)
                tar.addfile(info)
            elif kind == "hardlink":
                info.type = tarfile.LNKTYPE
                info.linkname = str(payload)
                tar.addfile(info)
            else:
                data = payload if isinstance(payload, bytes) else str(payload).encode()
                info.size = len(data)
                info.mode = 0o644
                tar.addfile(info, io.BytesIO(data))
    return buffer.getvalue()


def gzip_layer(entries: Iterable[Entry]) -> bytes:
    """Create a gzip-compressed tar layer in memory."""
    return gzip.compress(build_layer(entries))


def make_layer(index: int, blob: bytes) -> LayerHandle:
    return LayerHandle(
        index=index,
        digest=calculate_digest(blob),
        size=len(blob),
        media_type="application/vnd.oci.image.layer.v1.tar+gzip",
        loader=lambda: blob,
    )


def make_image(
    blobs: List[bytes],
    history: Optional[List[Tuple[str, bool]]] = None,
    name: str = "index.docker.io/library/test:latest",
) -> Image:
    """Create an in-memory image from layer blobs and (command, empty) pairs."""
    if history is None:
        history = [(f"/bin/sh -c step {i}", False) for i in range(1, len(blobs) + 1)]
    return Image(
        name=name,
        layers=[make_layer(i, blob) for i, blob in enumerate(blobs, start=1)],
        history=[
            HistoryRecord(position=i, created_by=cmd, empty_layer=empty)
            for i, (cmd, empty) in enumerate(history, start=1)
        ],
        architecture="amd64",
        os="linux",
    )


def image_config(history: List[Tuple[str, bool]], diff_ids: Optional[List[str]] = None) -> dict:
    """Create an image config document."""
    return {
        "architecture": "amd64",
        "os": "linux",
        "created": "2025-01-15T10:30:45Z",
        "config": {"Cmd": ["/bin/sh"]},
        "rootfs": {"type": "layers", "diff_ids": diff_ids or []},
        "history": [
            {"created_by": cmd, **({"empty_layer": True} if empty else {})}
            for cmd, empty in history
        ],
    }


def add_bytes(tar: tarfile.TarFile, name: str, data: bytes) -> None:
    info = tarfile.TarInfo(name)
    info.size = len(data)
    tar.addfile(info, io.BytesIO(data))


def add_json(tar: tarfile.TarFile, name: str, document: object) -> None:
    add_bytes(tar, name, json.dumps(document).encode("utf-8"))
