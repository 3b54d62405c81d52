"""Filename protocol shared with the zsh plugin.

The shell hook and the daemon talk only through file names in the shared
directory:

- ``zsh-ai-input-<token>``   request written by the shell hook
- ``zsh-ai-output-<token>``  response written by the daemon
- ``*.tmp``                  transient write target, never a request

The token (pid plus a counter or timestamp on the shell side) is the only
link between a request and its response; there is no index file.
"""

import os
from typing import Union

INPUT_MARKER = "-input-"
OUTPUT_MARKER = "-output-"
TMP_SUFFIX = ".tmp"

PathLike = Union[str, os.PathLike]


def is_eligible(path: PathLike) -> bool:
    """Check whether a path names a request file.

    Plain substring rules: the input marker must be present, the output
    marker must not, and the name must not end with the temp suffix.

    Examples:
        >>> is_eligible("/tmp/zsh-ai-suggestions/zsh-ai-input-42")
        True
        >>> is_eligible("/tmp/zsh-ai-suggestions/zsh-ai-output-42")
        False
        >>> is_eligible("/tmp/zsh-ai-suggestions/zsh-ai-input-42.tmp")
        False
    """
    name = os.fspath(path)
    if OUTPUT_MARKER in name or name.endswith(TMP_SUFFIX):
        return False
    return INPUT_MARKER in name


def response_path(path: PathLike) -> str:
    """Derive the response path for a request path.

    Replaces the first input marker with the output marker, keeping the
    directory prefix and the token.

    Raises:
        ValueError: If the path is not an eligible request path
    """
    name = os.fspath(path)
    if not is_eligible(name):
        raise ValueError(f"not a request path: {name}")
    return name.replace(INPUT_MARKER, OUTPUT_MARKER, 1)


def temp_path(path: PathLike) -> str:
    """Sibling temp path used while publishing ``path``."""
    return os.fspath(path) + TMP_SUFFIX


def is_stale(name: PathLike) -> bool:
    """Check whether a leftover file is removed by the start-up sweep.

    Request files and temp files are stale; response files are not.
    """
    name = os.fspath(name)
    return name.endswith(TMP_SUFFIX) or (INPUT_MARKER in name and OUTPUT_MARKER not in name)
