"""Filesystem writer for generated projects.

The only module in the scaffolder that touches the disk.  It receives the
directory list and composed files from a ``GenerationPlan`` and writes them
under a project root.  Blocking I/O runs in worker threads via
``asyncio.to_thread`` so the CLI's progress display stays live.
"""

from __future__ import annotations

import asyncio
import shutil
from collections.abc import Callable, Iterable
from pathlib import Path


class WriteError(OSError):
    """Writing the project failed at *path*.

    Chained from the underlying ``OSError``.
    """

    def __init__(self, path: str | Path, message: str) -> None:
        super().__init__(f"{path}: {message}")
        self.path = Path(path)
        self.message = message


def _is_non_empty_dir(path: Path) -> bool:
    return path.is_dir() and any(path.iterdir())


def _write_file(path: Path, content: str) -> None:
    """Synchronous helper: write *content* as UTF-8, byte for byte."""
    with path.open("w", encoding="utf-8", newline="") as fh:
        fh.write(content)


class ProjectWriter:
    """Writes a planned project tree under *root*.

    Args:
        root: Project directory.  It may not exist yet; if it exists it must
            be empty.
        on_file: Optional callback invoked with each relative path after it
            has been written (used for progress reporting).
    """

    def __init__(
        self,
        root: str | Path,
        on_file: Callable[[str], None] | None = None,
    ) -> None:
        self.root = Path(root)
        self.on_file = on_file

    async def write(
        self,
        directories: Iterable[str],
        files: Iterable[tuple[str, str]],
    ) -> Path:
        """Create *directories*, then write each ``(path, content)`` in order.

        Files are written one at a time.  The first failure, an interrupt or a
        cancellation stops the run; if this call created the project root, it
        is removed again.

        Returns:
            The project root.

        Raises:
            WriteError: the root is a non-empty directory, or any directory
                or file could not be created.
        """
        if _is_non_empty_dir(self.root):
            raise WriteError(self.root, "Directory already exists and is not empty")
        if self.root.exists() and not self.root.is_dir():
            raise WriteError(self.root, "Path exists and is not a directory")

        created_root = not self.root.exists()
        current = self.root
        try:
            await asyncio.to_thread(self.root.mkdir, parents=True, exist_ok=True)
            for rel in directories:
                current = self.root / rel
                await asyncio.to_thread(current.mkdir, parents=True, exist_ok=True)
            for rel, content in files:
                current = self.root / rel
                await asyncio.to_thread(_write_file, current, content)
                if self.on_file is not None:
                    self.on_file(rel)
        except OSError as exc:
            if created_root:
                await asyncio.to_thread(shutil.rmtree, self.root, ignore_errors=True)
            raise WriteError(current, exc.strerror or str(exc)) from exc
        except BaseException:
            # Interrupt or cancellation: clean up synchronously, then propagate.
            if created_root:
                shutil.rmtree(self.root, ignore_errors=True)
            raise

        return self.root
