"""Helpers for locating tree dump files."""

from __future__ import annotations

from pathlib import Path
from typing import Generator, Iterable

DUMP_EXTENSIONS = (".yaml", ".yml", ".json")


def iter_dump_files(
    root_paths: Iterable[str], extensions: tuple[str, ...] = DUMP_EXTENSIONS
) -> Generator[Path, None, None]:
    """Yield dump files given directly or found beneath the provided directories."""

    for root in root_paths:
        path = Path(root)
        if path.is_file():
            yield path
            continue
        for candidate in sorted(path.rglob("*")):
            if candidate.suffix in extensions and candidate.is_file():
                yield candidate
