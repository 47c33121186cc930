"""Environment-based configuration and static lookup tables."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated, Any

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode

from constforge.constants import (
    CONTEXT_WINDOW_CHARS,
    MAX_FILE_SIZE_BYTES,
    SCAN_MAX_CONCURRENCY,
    Environment,
)

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Reads from .env file and CONSTFORGE_* environment variables."""

    # Logging
    log_level: str = "WARNING"

    # Catalog + rules
    catalog_path: Path = Path("constants.yaml")
    rules_path: Path | None = None
    environment: Environment | None = None

    # Scanning
    scan_max_concurrency: int = SCAN_MAX_CONCURRENCY
    context_window_chars: int = CONTEXT_WINDOW_CHARS
    max_file_size_bytes: int = MAX_FILE_SIZE_BYTES
    skip_directories: Annotated[list[str], NoDecode] = [
        "node_modules",
        "vendor",
        ".venv",
        "venv",
        "__pycache__",
        "build",
        "dist",
        "target",
        "coverage",
        ".git",
        ".svn",
        ".hg",
        ".next",
    ]
    scan_extensions: Annotated[list[str], NoDecode] = [
        ".py",
        ".js",
        ".mjs",
        ".cjs",
        ".jsx",
        ".ts",
        ".tsx",
        ".mts",
        ".cts",
        ".java",
        ".go",
        ".rs",
        ".c",
        ".h",
        ".cpp",
        ".cs",
        ".rb",
        ".php",
        ".kt",
        ".swift",
        ".yml",
        ".yaml",
        ".toml",
        ".sh",
    ]

    # Suggestions
    python_import_module: str = "constants"
    script_import_path: str = "@/constants"

    @field_validator("skip_directories", "scan_extensions", mode="before")
    @classmethod
    def _parse_list(cls, v: Any) -> Any:
        """Accept comma-separated string or JSON array."""
        if isinstance(v, str):
            return [s.strip() for s in v.split(",") if s.strip()]
        return v

    @field_validator("scan_extensions")
    @classmethod
    def _normalize_extensions(cls, v: list[str]) -> list[str]:
        normalized = [
            (e if e.startswith(".") else f".{e}").lower() for e in v
        ]
        if not normalized:
            logger.warning(
                "CONSTFORGE_SCAN_EXTENSIONS is empty; "
                "scans will not inspect any file"
            )
        return normalized

    @field_validator("scan_max_concurrency", "context_window_chars")
    @classmethod
    def _positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("must be at least 1")
        return v

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_prefix": "CONSTFORGE_",
        "extra": "ignore",
    }


# File extension → language name mapping
EXTENSION_MAP: dict[str, str] = {
    # Python
    ".py": "python",
    ".pyi": "python",
    ".pyw": "python",
    # JavaScript
    ".js": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".jsx": "javascript",
    # TypeScript
    ".ts": "typescript",
    ".tsx": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    # JVM
    ".java": "java",
    ".kt": "kotlin",
    ".kts": "kotlin",
    ".scala": "scala",
    # Systems
    ".go": "go",
    ".rs": "rust",
    ".c": "c",
    ".h": "c",
    ".cpp": "cpp",
    ".cc": "cpp",
    ".hpp": "cpp",
    ".cs": "c_sharp",
    ".swift": "swift",
    # Scripting
    ".rb": "ruby",
    ".php": "php",
    ".sh": "bash",
    ".bash": "bash",
    # Config
    ".yml": "yaml",
    ".yaml": "yaml",
    ".toml": "toml",
}

# Language → line-comment markers; block comments are /* */ for C-family
LINE_COMMENT_MARKERS: dict[str, tuple[str, ...]] = {
    "python": ("#",),
    "ruby": ("#",),
    "bash": ("#",),
    "yaml": ("#",),
    "toml": ("#",),
    "php": ("//", "#"),
}
DEFAULT_LINE_COMMENT_MARKERS: tuple[str, ...] = ("//",)

BLOCK_COMMENT_LANGUAGES: frozenset[str] = frozenset({
    "javascript",
    "typescript",
    "java",
    "kotlin",
    "scala",
    "go",
    "rust",
    "c",
    "cpp",
    "c_sharp",
    "swift",
    "php",
})

# Languages whose suggestions use ES-module import syntax
SCRIPT_LANGUAGES: frozenset[str] = frozenset({"javascript", "typescript"})
