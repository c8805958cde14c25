"""Tests for the layer-explorer CLI."""

from click.testing import CliRunner

from layer_explorer import __version__
from layer_explorer.cli import main


def test_version():
    result = CliRunner().invoke(main, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_layers_command(docker_save_tar):
    result = CliRunner().invoke(main, ["layers", str(docker_save_tar)])

    assert result.exit_code == 0, result.output
    assert "Image test/myapp:v1.0 contains 2 layers:" in result.stdout
    assert "  • Layer 1 : sha256:" in result.stdout
    assert "  • Layer 2 : sha256:" in result.stdout
    assert "Total size (compressed): 0.00 MB" in result.stdout


def test_layers_command_out_of_range(docker_save_tar):
    result = CliRunner().invoke(main, ["layers", str(docker_save_tar), "-l", "3"])

    assert result.exit_code == 1
    assert "Error: the image only contains 2 layers (you requested layer 3)" in result.stderr
    assert "Layer" not in result.stdout


def test_history_command(docker_save_tar):
    result = CliRunner().invoke(main, ["history", str(docker_save_tar)])

    assert result.exit_code == 0, result.output
    lines = result.stdout.splitlines()
    assert lines[0] == "[01] • ADD file:motd in /etc"
    assert lines[1].startswith("\t↳ Layer 1 sha256:")
    assert lines[2] == "[02]   ENV A=1"
    assert lines[3] == "[03] • cp data.bin /srv"
    assert lines[4].startswith("\t↳ Layer 2 sha256:")
    assert lines[-1].startswith("Total size (compressed):")


def test_fs_command(docker_save_tar):
    result = CliRunner().invoke(main, ["fs", str(docker_save_tar), "-l", "1"])

    assert result.exit_code == 0, result.output
    lines = result.stdout.splitlines()
    assert lines[0] == "Content of layer #1 of test/myapp:v1.0:"
    assert lines[1] == "drwxr-xr-x        0  etc"
    assert lines[2] == "-rw-r--r--        8  etc/motd"


def test_filesystem_alias(docker_save_tar):
    result = CliRunner().invoke(main, ["filesystem", str(docker_save_tar), "--layer", "2"])

    assert result.exit_code == 0, result.output
    assert "srv/data.bin" in result.stdout


def test_fs_layer_must_be_positive(docker_save_tar):
    result = CliRunner().invoke(main, ["fs", str(docker_save_tar), "-l", "0"])
    assert result.exit_code == 2


def test_cat_command_is_byte_exact(docker_save_tar):
    result = CliRunner().invoke(main, ["cat", str(docker_save_tar), "/srv/data.bin", "-l", "2"])

    assert result.exit_code == 0, result.output
    assert result.stdout_bytes == bytes(range(256))
    assert "=== srv/data.bin (layer #2, 256 bytes) ===" in result.stderr


def test_cat_directory(docker_save_tar):
    result = CliRunner().invoke(main, ["cat", str(docker_save_tar), "/etc", "-l", "1"])

    assert result.exit_code == 1
    assert "is a directory" in result.stderr
    assert result.stdout_bytes == b""


def test_cat_not_found(docker_save_tar):
    result = CliRunner().invoke(main, ["cat", str(docker_save_tar), "/etc/passwd"])

    assert result.exit_code == 1
    assert "Error: etc/passwd not found in layer #1" in result.stderr


def test_invalid_reference():
    result = CliRunner().invoke(main, ["layers", "Not A Reference"])

    assert result.exit_code == 1
    assert "Error: Invalid" in result.stderr
