"""Base para fuentes de exportaciones: carpeta raíz + archivo más reciente."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Generic, TypeVar

BundleT = TypeVar("BundleT")


@dataclass(frozen=True)
class SourcePaths:
    """Folder holding export files."""

    root: Path


class DataSource(ABC, Generic[BundleT]):
    """Export folder reader.

    Subclasses set ``pattern`` (glob for their export files) and parse a
    single file in ``load_export``.
    """

    pattern: str = "*"

    def __init__(self, paths: SourcePaths) -> None:
        self._paths = paths

    def validate(self) -> None:
        """Raise FileNotFoundError when the export folder is missing."""
        if not self._paths.root.exists():
            raise FileNotFoundError(str(self._paths.root))

    def export_files(self) -> list[Path]:
        """Matching export files, newest first by mtime."""
        return sorted(
            self._paths.root.glob(self.pattern),
            key=lambda p: p.stat().st_mtime,
            reverse=True,
        )

    def newest_export(self) -> Path:
        """Return the newest matching export file.

        Raises:
            FileNotFoundError: If no file matches ``pattern``.
        """
        files = self.export_files()
        if not files:
            raise FileNotFoundError(f"No {self.pattern} in {self._paths.root}")
        return files[0]

    def load_newest(self) -> tuple[Path, BundleT]:
        """Validate the folder, then parse its newest export."""
        self.validate()
        path = self.newest_export()
        return path, self.load_export(path)

    @abstractmethod
    def load_export(self, path: Path) -> BundleT:
        """Parse one export file.

        Raises:
            ValueError: If the file content has the wrong shape.
        """
