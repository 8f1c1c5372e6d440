"""
Writing extracted parts to disk.
"""

import re
from pathlib import Path
from typing import Union

_UNSAFE_CHARS = re.compile(r"[:/]")


def output_path_for(output_dir: Union[str, Path], location: str) -> Path:
    """
    Map a Content-Location to a flat file path inside ``output_dir``.

    Colons and slashes are replaced with underscores, so
    ``https://example.com/a.css`` becomes ``https___example.com_a.css``.
    """
    return Path(output_dir) / _UNSAFE_CHARS.sub("_", location)


def write_output(path: Union[str, Path], content: bytes) -> Path:
    """
    Write bytes to a path, creating parent directories as needed.

    Returns:
        The written path
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content)
    return path
