"""Test configuration and fixtures."""

import json
import tarfile

import pytest

from layer_explorer.utils.digest import calculate_digest
from tests.helpers import (
    OS_RELEASE,
    add_bytes,
    add_json,
    build_layer,
    gzip_layer,
    image_config,
    make_image,
)

SCENARIO_ENTRIES = [
    ("./a.txt", "file", b"hello"),
    ("b/", "dir", None),
    (".wh.c.txt", "file", b""),
]


@pytest.fixture
def scenario_layer():
    """Layer with a file, a directory and a whiteout marker."""
    return build_layer(SCENARIO_ENTRIES)


@pytest.fixture
def sample_image():
    """Two gzip layers; the second deletes a file from the first."""
    base = gzip_layer(
        [
            ("./", "dir", None),
            ("./etc/", "dir", None),
            ("./etc/os-release", "file", OS_RELEASE),
            ("./bin/", "dir", None),
            ("./bin/sh", "symlink", "/bin/busybox"),
            ("./tmp/old.log", "file", b"stale"),
        ]
    )
    app = gzip_layer(
        [
            ("app/", "dir", None),
            ("app/main.py", "file", b"print('hi')\n"),
            ("tmp/.wh.old.log", "file", b""),
        ]
    )
    history = [
        ("/bin/sh -c #(nop) ADD file:abc in / ", False),
        ('/bin/sh -c #(nop)  CMD ["/bin/sh"]', True),
        ("/bin/sh -c mkdir /app && echo done", False),
    ]
    return make_image([base, app], history)


@pytest.fixture
def docker_save_tar(tmp_path):
    """A "docker save" tarball in the OCI layout with two layers."""
    layer_one = build_layer([("etc/", "dir", None), ("etc/motd", "file", b"welcome\n")])
    layer_two = gzip_layer([("srv/data.bin", "file", bytes(range(256)))])
    digests = [calculate_digest(layer_one), calculate_digest(layer_two)]
    config = image_config(
        [
            ("/bin/sh -c #(nop) ADD file:motd in /etc", False),
            ("/bin/sh -c #(nop)  ENV A=1", True),
            ("/bin/sh -c cp data.bin /srv", False),
        ],
        diff_ids=digests,
    )
    config_blob = json.dumps(config).encode("utf-8")
    config_digest = calculate_digest(config_blob)

    tar_path = tmp_path / "image.tar"
    with tarfile.open(tar_path, "w") as tar:
        layer_paths = []
        for digest, blob in zip(digests, [layer_one, layer_two]):
            path = f"blobs/sha256/{digest.split(':', 1)[1]}"
            add_bytes(tar, path, blob)
            layer_paths.append(path)
        config_path = f"blobs/sha256/{config_digest.split(':', 1)[1]}"
        add_bytes(tar, config_path, config_blob)
        add_json(
            tar,
            "manifest.json",
            [
                {
                    "Config": config_path,
                    "RepoTags": ["test/myapp:v1.0"],
                    "Layers": layer_paths,
                    "LayerSources": {
                        digests[1]: {
                            "mediaType": "application/vnd.oci.image.layer.v1.tar+gzip",
                            "size": len(layer_two),
                            "digest": digests[1],
                        }
                    },
                }
            ],
        )
    return tar_path
