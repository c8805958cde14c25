"""Tests for build command prettification."""

import pytest

from layer_explorer.commands import prettify_command


def test_shell_prefix_whitespace_and_semicolons():
    """Shell prefix goes, whitespace collapses, semicolons break lines."""
    raw = '/bin/sh -c "apt-get update && apt-get install -y curl;  clean"'

    assert prettify_command(raw) == '"apt-get update && apt-get install -y curl;\n\t clean"'


def test_long_flags_wrap_onto_indented_lines():
    """Every " --" starts a new indented line."""
    raw = "/bin/sh -c apt-get install --no-install-recommends  --yes curl"

    assert prettify_command(raw) == (
        "apt-get install\n\t--no-install-recommends\n\t--yes curl"
    )


def test_nop_marker_is_removed():
    """Metadata-only steps read as their Dockerfile instruction."""
    assert prettify_command('/bin/sh -c #(nop)  CMD ["/bin/sh"]') == 'CMD ["/bin/sh"]'


def test_bash_prefix():
    assert prettify_command("/bin/bash -c echo hi") == "echo hi"


def test_prefix_only_stripped_at_start():
    """A shell invocation in the middle of a command is kept."""
    raw = "RUN |1 X=1 /bin/sh -c make"
    assert prettify_command(raw) == raw


@pytest.mark.parametrize("raw", ["", "   ", "\t\n"])
def test_blank_commands(raw):
    assert prettify_command(raw) == ""


def test_tabs_and_newlines_collapse():
    assert prettify_command("  echo\t\ta \n b  ") == "echo a b"
