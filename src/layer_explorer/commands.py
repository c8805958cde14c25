"""Readable rendering of build instructions."""

import re

SHELL_PREFIXES = ("/bin/sh -c ", "/bin/bash -c ")
NOP_MARKER = "#(nop) "

_WHITESPACE = re.compile(r"\s+")


def prettify_command(command: str) -> str:
    """Turn a raw "created_by" string into a multi-line rendering.

    Long flags (" --") move to their own indented line and every ";" is
    followed by a line break. Not idempotent: call once per record.

    Examples:
        prettify_command('/bin/sh -c #(nop)  CMD ["sh"]') -> 'CMD ["sh"]'
    """
    for prefix in SHELL_PREFIXES:
        if command.startswith(prefix):
            command = command[len(prefix):]
            break
    if command.startswith(NOP_MARKER):
        command = command[len(NOP_MARKER):]

    command = _WHITESPACE.sub(" ", command.strip())

    if " --" in command:
        command = command.replace(" --", "\n\t--")

    return command.replace(";", ";\n\t")
