"""Walk a source tree, yielding candidate files for literal scanning."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import TypeAlias

import pathspec

from constforge.config import Settings
from constforge.constants import BINARY_DETECTION_BUFFER

logger = logging.getLogger(__name__)

WalkErrorHandler: TypeAlias = Callable[[Path, OSError], None]


def is_binary(path: Path) -> bool:
    """Return True if the file appears to be binary (null byte in first N bytes)."""
    try:
        with open(path, "rb") as f:
            chunk = f.read(BINARY_DETECTION_BUFFER)
        return b"\x00" in chunk
    except OSError:
        return True


def iter_source_files(
    root: Path,
    settings: Settings,
    on_error: WalkErrorHandler | None = None,
) -> Iterator[Path]:
    """Yield files under ``root`` in sorted order.

    * A file ``root`` is yielded as-is, whatever its extension.
    * Skips hidden directories and ``settings.skip_directories``.
    * Honours ``root/.gitignore`` via pathspec.
    * Only yields files whose suffix is in ``settings.scan_extensions``.
    * Symlinks resolving outside the root are skipped.
    * Each real directory is entered once, so symlink cycles terminate.
    * Unlistable directories are reported to ``on_error`` and skipped.
    """
    if root.is_file():
        yield root
        return

    skip_dirs = set(settings.skip_directories)
    extensions = set(settings.scan_extensions)
    spec = _load_gitignore(root)
    resolved_root = root.resolve()
    yield from _walk(
        root, root, resolved_root, skip_dirs, extensions, spec, on_error,
        {resolved_root},
    )


def _walk(
    current: Path,
    root: Path,
    resolved_root: Path,
    skip_dirs: set[str],
    extensions: set[str],
    spec: pathspec.PathSpec,
    on_error: WalkErrorHandler | None,
    seen: set[Path],
) -> Iterator[Path]:
    """Recursive walk helper with symlink protection."""
    try:
        items = sorted(current.iterdir())
    except OSError as exc:
        logger.warning("Cannot list %s: %s", current, exc)
        if on_error is not None:
            on_error(current, exc)
        return

    for item in items:
        if item.is_symlink():
            resolved = item.resolve()
            if not resolved.is_relative_to(resolved_root):
                continue
        rel = item.relative_to(root).as_posix()
        if item.is_dir():
            if item.name.startswith(".") or item.name in skip_dirs:
                continue
            if spec.match_file(rel + "/"):
                continue
            real = item.resolve()
            if real in seen:
                logger.debug("Skipping %s: already visited as %s", item, real)
                continue
            seen.add(real)
            yield from _walk(
                item, root, resolved_root, skip_dirs, extensions,
                spec, on_error, seen,
            )
        elif item.is_file():
            if item.suffix.lower() not in extensions:
                continue
            if not spec.match_file(rel):
                yield item


def _load_gitignore(root: Path) -> pathspec.PathSpec:
    """Load .gitignore patterns using pathspec."""
    gitignore = root / ".gitignore"
    if not gitignore.exists():
        return pathspec.PathSpec.from_lines("gitignore", [])
    try:
        with open(gitignore, encoding="utf-8") as f:
            return pathspec.PathSpec.from_lines("gitignore", f)
    except OSError:
        return pathspec.PathSpec.from_lines("gitignore", [])
