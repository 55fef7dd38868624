"""
File access that turns permission failures into ``PermissionDeniedError``
with a ready-to-run ``chmod`` fix. Any other ``OSError`` propagates as is.
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import List, Union

from secrets_sync.exceptions import PermissionDeniedError

PathLike = Union[str, "os.PathLike[str]"]


def fix_command(operation: str, path: PathLike) -> str:
    """``chmod 644`` for a file to read, ``chmod 755`` for a directory to write into or list."""
    mode = "755" if operation in ("write", "readdir") else "644"
    return f'chmod {mode} "{os.fspath(path)}"'


def safe_read_file(path: PathLike, errors: str = "strict") -> str:
    try:
        with open(path, "r", encoding="utf-8", errors=errors) as f:
            return f.read()
    except PermissionError as e:
        raise PermissionDeniedError(os.fspath(path), "read", fix_command("read", path)) from e


def safe_write_file(path: PathLike, content: str) -> None:
    """
    Write ``content`` as UTF-8.

    When the file already exists the fix targets the file itself; otherwise
    the directory that should hold it is the one lacking permission.
    """
    try:
        with open(path, "w", encoding="utf-8") as f:
            f.write(content)
    except PermissionError as e:
        if os.path.exists(path):
            fix = fix_command("read", path)
        else:
            fix = fix_command("write", Path(path).parent)
        raise PermissionDeniedError(os.fspath(path), "write", fix) from e


def safe_read_dir(path: PathLike) -> List[str]:
    try:
        return os.listdir(path)
    except PermissionError as e:
        raise PermissionDeniedError(os.fspath(path), "read", fix_command("readdir", path)) from e
