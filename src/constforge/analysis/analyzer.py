"""Migration analyzer — find literals that duplicate registered values.

The analyzer only reads: a frozen :class:`RegistrySnapshot`, an
optional (frozen) semantic layer used to name suggestions, and the
files under the scan root. Each file is scanned independently, so
:meth:`MigrationAnalyzer.scan_parallel` can fan out across threads.
Occurrences keep file order within a file; ordering between files is
unspecified in parallel mode.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Iterator
from pathlib import Path

from constforge.analysis.domains import infer_domains, split_identifier
from constforge.analysis.schemas import (
    DetectedOccurrence,
    FileScanResult,
    ScanReport,
    ScanSummary,
    ScanWarning,
)
from constforge.analysis.tokenizer import LiteralToken, line_text, tokenize
from constforge.analysis.walker import is_binary, iter_source_files
from constforge.config import EXTENSION_MAP, SCRIPT_LANGUAGES, Settings
from constforge.constants import (
    MODERATE_MAX_OCCURRENCES,
    SIMPLE_MAX_OCCURRENCES,
    ComplexityLevel,
    ScanWarningKind,
    ValueDomain,
)
from constforge.errors import ScanRootError, classify_read_error
from constforge.registry.atomic import RegistrySnapshot
from constforge.registry.semantic import SemanticMappingLayer

logger = logging.getLogger(__name__)


def score_complexity(occurrence_count: int) -> ComplexityLevel:
    """Bucket a per-file count: 0 / 1–3 / 4–8 / >8."""
    if occurrence_count < 0:
        msg = f"occurrence count cannot be negative: {occurrence_count}"
        raise ValueError(msg)
    if occurrence_count == 0:
        return ComplexityLevel.NONE
    if occurrence_count <= SIMPLE_MAX_OCCURRENCES:
        return ComplexityLevel.SIMPLE
    if occurrence_count <= MODERATE_MAX_OCCURRENCES:
        return ComplexityLevel.MODERATE
    return ComplexityLevel.COMPLEX


def build_report(
    results: Iterable[FileScanResult], *, interrupted: bool = False
) -> ScanReport:
    """Fold per-file results into a report.

    ``total_files`` counts files actually scanned; skipped files and
    unlistable directories appear only under ``warnings``.
    """
    occurrences: list[DetectedOccurrence] = []
    warnings: list[ScanWarning] = []
    complexity: dict[str, ComplexityLevel] = {}
    total_files = 0
    for result in results:
        if result.warning is not None:
            warnings.append(result.warning)
            continue
        total_files += 1
        if result.occurrences:
            occurrences.extend(result.occurrences)
            complexity[result.file_path] = score_complexity(
                len(result.occurrences)
            )
    return ScanReport(
        occurrences=occurrences,
        warnings=warnings,
        summary=ScanSummary(
            total_files=total_files,
            total_occurrences=len(occurrences),
            complexity_by_file=complexity,
        ),
        interrupted=interrupted,
    )


def display_path(path: Path, root: Path | None) -> str:
    """Path relative to a directory root, else as given."""
    if root is not None and root.is_dir():
        try:
            return path.relative_to(root).as_posix()
        except ValueError:
            pass
    return path.as_posix()


def read_source(path: Path, display: str, settings: Settings) -> str | ScanWarning:
    """Read a candidate file as UTF-8, or say why it was skipped."""
    try:
        size = path.stat().st_size
        if size > settings.max_file_size_bytes:
            return _skipped(
                display,
                ScanWarningKind.TOO_LARGE,
                f"{size} bytes exceeds limit of {settings.max_file_size_bytes}",
            )
        if is_binary(path):
            return _skipped(display, ScanWarningKind.BINARY, "binary content")
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        return _skipped(display, classify_read_error(exc), str(exc))


def walk_error(path: Path, root: Path, error: OSError) -> FileScanResult:
    """A directory the walker could not list, as a skipped result."""
    display = display_path(path, root)
    return FileScanResult(
        file_path=display,
        warning=ScanWarning(
            file_path=display,
            kind=classify_read_error(error),
            message=str(error),
        ),
    )


def _skipped(display: str, kind: ScanWarningKind, message: str) -> ScanWarning:
    logger.warning("Skipping %s (%s): %s", display, kind, message)
    return ScanWarning(file_path=display, kind=kind, message=message)


class MigrationAnalyzer:
    """Scans source trees for literals matching the registry."""

    def __init__(
        self,
        snapshot: RegistrySnapshot,
        layer: SemanticMappingLayer | None = None,
        *,
        settings: Settings | None = None,
        domain: ValueDomain | str | None = None,
    ) -> None:
        self._snapshot = snapshot
        self._layer = layer
        self._settings = settings or Settings()
        self._domain = ValueDomain(domain) if domain is not None else None

    # ── scanning ─────────────────────────────────────────

    def scan(self, root_dir: Path | str) -> Iterator[DetectedOccurrence]:
        """Lazily yield every occurrence under ``root_dir``.

        Restartable: each call walks the tree afresh. Unreadable files
        are skipped with a logged warning; use :meth:`scan_files` or
        :meth:`analyze` to receive the warnings as data.
        """
        results = self.scan_files(root_dir)
        return (occ for result in results for occ in result.occurrences)

    def scan_files(self, root_dir: Path | str) -> Iterator[FileScanResult]:
        """Lazily yield one :class:`FileScanResult` per visited file."""
        root = self._check_root(root_dir)
        return self._iter_results(root)

    def analyze(self, root_dir: Path | str) -> ScanReport:
        """Scan sequentially and build a report."""
        return build_report(self.scan_files(root_dir))

    async def scan_parallel(self, root_dir: Path | str) -> ScanReport:
        """Scan files concurrently on worker threads.

        Concurrency is bounded by ``settings.scan_max_concurrency``.
        Files share nothing mutable: the snapshot is read-only.
        """
        root = self._check_root(root_dir)
        walk_errors: list[FileScanResult] = []
        paths = list(
            iter_source_files(
                root,
                self._settings,
                on_error=lambda p, e: walk_errors.append(
                    walk_error(p, root, e)
                ),
            )
        )
        semaphore = asyncio.Semaphore(self._settings.scan_max_concurrency)

        async def _scan_one(path: Path) -> FileScanResult:
            async with semaphore:
                return await asyncio.to_thread(self.scan_file, path, root)

        results = await asyncio.gather(*(_scan_one(p) for p in paths))
        return build_report([*results, *walk_errors])

    def scan_file(self, path: Path, root: Path | None = None) -> FileScanResult:
        """Scan a single file; read failures become a warning."""
        display = display_path(path, root)
        text = read_source(path, display, self._settings)
        if isinstance(text, ScanWarning):
            return FileScanResult(file_path=display, warning=text)

        language = EXTENSION_MAP.get(path.suffix.lower(), "unknown")
        occurrences: list[DetectedOccurrence] = []
        for token in tokenize(text, language):
            atomic_id, domain = self._match(text, token)
            if atomic_id is None:
                continue
            occurrences.append(
                self._occurrence(display, text, token, atomic_id, domain)
            )
        return FileScanResult(file_path=display, occurrences=occurrences)

    # ── suggestions ──────────────────────────────────────

    @staticmethod
    def score_complexity(occurrence_count: int) -> ComplexityLevel:
        return score_complexity(occurrence_count)

    def generate_suggestion(self, occurrence: DetectedOccurrence) -> str:
        """Replacement code text (import + reference). Never writes files."""
        name = self._suggest_name(occurrence)
        if name is None:
            return (
                f"bind a semantic name to {occurrence.matched_atomic_id} "
                "and reference it here"
            )

        literal = occurrence.matched_literal
        line = occurrence.source_line
        start = occurrence.column - 1
        if "\n" not in literal and line[start:start + len(literal)] == literal:
            replaced = line[:start] + name + line[start + len(literal):]
        else:
            replaced = name

        root_symbol = name.split(".", 1)[0]
        language = EXTENSION_MAP.get(Path(occurrence.file_path).suffix.lower())
        if language == "python":
            module = self._settings.python_import_module
            return f"from {module} import {root_symbol}\n{replaced.strip()}"
        if language in SCRIPT_LANGUAGES:
            path = self._settings.script_import_path
            return f"import {{ {root_symbol} }} from '{path}';\n{replaced.strip()}"
        return replaced.strip()

    # ── internals ────────────────────────────────────────

    def _iter_results(self, root: Path) -> Iterator[FileScanResult]:
        walk_errors: list[FileScanResult] = []
        for path in iter_source_files(
            root,
            self._settings,
            on_error=lambda p, e: walk_errors.append(
                walk_error(p, root, e)
            ),
        ):
            while walk_errors:
                yield walk_errors.pop(0)
            yield self.scan_file(path, root)
        yield from walk_errors

    def _check_root(self, root_dir: Path | str) -> Path:
        root = Path(root_dir)
        if not root.exists():
            msg = f"{root} does not exist"
            raise ScanRootError(msg)
        if not (root.is_dir() or root.is_file()):
            msg = f"{root} is not a file or directory"
            raise ScanRootError(msg)
        return root

    def _match(
        self, text: str, token: LiteralToken
    ) -> tuple[str | None, ValueDomain | None]:
        left = text[text.rfind("\n", 0, token.start) + 1:token.start]
        for domain in infer_domains(left, token.kind):
            if self._domain is not None and domain is not self._domain:
                continue
            atomic_id = self._snapshot.lookup(domain, token.value)
            if atomic_id is not None:
                return atomic_id, domain
        return None, None

    def _occurrence(
        self,
        display: str,
        text: str,
        token: LiteralToken,
        atomic_id: str | None,
        domain: ValueDomain | None,
    ) -> DetectedOccurrence:
        window = self._settings.context_window_chars
        occurrence = DetectedOccurrence(
            file_path=display,
            line=token.line,
            column=token.column,
            matched_literal=token.raw,
            matched_atomic_id=atomic_id,
            domain=domain,
            context_snippet=text[max(0, token.start - window):token.end + window],
            source_line=line_text(text, token),
        )
        occurrence.suggested_replacement = self.generate_suggestion(occurrence)
        return occurrence

    def _suggest_name(self, occurrence: DetectedOccurrence) -> str | None:
        if self._layer is None or occurrence.matched_atomic_id is None:
            return None
        names = self._layer.names_for(occurrence.matched_atomic_id)
        if not names:
            return None
        context_words = set(split_identifier(occurrence.source_line))

        def overlap(name: str) -> int:
            return len(context_words & set(split_identifier(name)))

        # max() keeps the first (alphabetical) name on ties
        return max(names, key=overlap)

