# Filesystem helpers shared by the test modules.

import os
from pathlib import Path


def write_tree(base: Path, files: dict):
    """Writes ``{"rel/path.txt": b"bytes"}`` under ``base``; a value of None makes a directory."""
    for rel, content in files.items():
        target = base / rel
        if content is None:
            target.mkdir(parents=True, exist_ok=True)
            continue
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content)


def snapshot(base: Path) -> dict:
    """Relative path -> bytes (None for directories) for everything under ``base``."""
    result = {}
    for dirpath, dirnames, filenames in os.walk(base):
        for name in dirnames:
            rel = Path(dirpath, name).relative_to(base).as_posix()
            result[rel] = None
        for name in filenames:
            full = Path(dirpath, name)
            result[full.relative_to(base).as_posix()] = full.read_bytes()
    return result
