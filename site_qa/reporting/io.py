"""File access used by report generation, kept behind a small interface."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol


class ReportIO(Protocol):
    def read_text(self, path: Path) -> str:
        ...

    def write_text(self, path: Path, content: str) -> None:
        ...

    def ensure_dir(self, path: Path) -> None:
        ...

    def glob(self, directory: Path, pattern: str) -> list[Path]:
        ...


class FileSystemIO:
    """Reads and writes UTF-8 files on the local disk."""

    def read_text(self, path: Path) -> str:
        return Path(path).read_text(encoding="utf-8")

    def write_text(self, path: Path, content: str) -> None:
        Path(path).write_text(content, encoding="utf-8")

    def ensure_dir(self, path: Path) -> None:
        Path(path).mkdir(parents=True, exist_ok=True)

    def glob(self, directory: Path, pattern: str) -> list[Path]:
        d = Path(directory)
        if not d.is_dir():
            return []
        return sorted(p for p in d.glob(pattern) if p.is_file())
