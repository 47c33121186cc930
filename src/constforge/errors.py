"""Exception taxonomy and scan-error classification.

Bootstrap-integrity errors signal modeling mistakes in the constant
catalog. They fail fast and propagate to the process entry point,
which prints the single-line message and exits non-zero.

Scan-time read failures are not raised past the per-file boundary:
:func:`classify_read_error` turns them into a warning category so the
scan of other files continues.
"""

from __future__ import annotations

from typing import Any

from constforge.constants import ScanWarningKind


class ConstforgeError(Exception):
    """Base class for every error raised by constforge."""


# ── Bootstrap integrity ──────────────────────────────────


class BootstrapIntegrityError(ConstforgeError):
    """A modeling mistake in the registry, bindings, or bundles."""


class DuplicateValueError(BootstrapIntegrityError):
    def __init__(
        self,
        domain: str,
        value: Any,
        existing: str,
        attempted: str,
    ) -> None:
        self.domain = domain
        self.value = value
        self.existing = existing
        self.attempted = attempted
        super().__init__(
            f"({domain}, {value!r}) is already registered as "
            f"{existing!r}; refusing conflicting description "
            f"{attempted!r}"
        )


class FrozenRegistryError(BootstrapIntegrityError):
    def __init__(self, what: str, detail: str) -> None:
        self.what = what
        self.detail = detail
        super().__init__(f"{what} is frozen; cannot {detail}")


class RegistryNotFrozenError(BootstrapIntegrityError):
    def __init__(self) -> None:
        super().__init__(
            "registry must be frozen before taking a snapshot"
        )


class AtomicValueTypeError(BootstrapIntegrityError, TypeError):
    def __init__(self, domain: str, value: Any) -> None:
        self.domain = domain
        self.value = value
        super().__init__(
            f"value {value!r} ({type(value).__name__}) is not valid "
            f"for domain {domain!r}"
        )


class UnknownAtomicIdError(BootstrapIntegrityError):
    def __init__(self, atomic_id: str) -> None:
        self.atomic_id = atomic_id
        super().__init__(f"unknown atomic id {atomic_id!r}")


class DuplicateBindingNameError(BootstrapIntegrityError):
    def __init__(
        self, name: str, existing_id: str, attempted_id: str
    ) -> None:
        self.name = name
        self.existing_id = existing_id
        self.attempted_id = attempted_id
        super().__init__(
            f"name {name!r} is already bound to {existing_id!r}; "
            f"cannot rebind to {attempted_id!r}"
        )


class UnboundNameError(BootstrapIntegrityError, KeyError):
    def __init__(self, name: str, context: str = "") -> None:
        self.name = name
        self.context = context
        suffix = f" ({context})" if context else ""
        super().__init__(f"name {name!r} is not bound{suffix}")

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the diagnostic single-line
        return str(self.args[0])


class RawLiteralDerivationError(BootstrapIntegrityError):
    def __init__(
        self,
        bundle: str,
        field: str,
        literal: Any,
        reason: str = "raw literals are not allowed",
    ) -> None:
        self.bundle = bundle
        self.field = field
        self.literal = literal
        super().__init__(
            f"bundle {bundle!r} field {field!r}: {literal!r}: "
            f"{reason}; reference a semantic name"
        )


class BundleRedefinitionError(BootstrapIntegrityError):
    def __init__(self, bundle: str) -> None:
        self.bundle = bundle
        super().__init__(
            f"bundle {bundle!r} is already composed with different "
            "entries; pass force=True to recompose"
        )


class CrossBundleReferenceError(BootstrapIntegrityError):
    def __init__(self, bundle: str, field: str, referenced: str) -> None:
        self.bundle = bundle
        self.field = field
        self.referenced = referenced
        super().__init__(
            f"bundle {bundle!r} field {field!r} references bundle "
            f"{referenced!r}; bundles may only use semantic names"
        )


# ── Review workflow ──────────────────────────────────────


class InvalidTransitionError(ConstforgeError):
    def __init__(self, current: str, target: str) -> None:
        self.current = current
        self.target = target
        super().__init__(
            f"cannot move occurrence from {current} to {target}"
        )


# ── Tool-level failures ──────────────────────────────────


class ScanRootError(ConstforgeError):
    """The scan root does not exist or is not readable."""


class RuleFileError(ConstforgeError):
    """A validation rule file is missing or malformed."""


class CatalogError(ConstforgeError):
    """A constant catalog file is missing or malformed."""


# ── Read-error classification ────────────────────────────


def classify_read_error(error: Exception) -> ScanWarningKind:
    """Classify a file read failure into a scan warning category.

    Checks exception types first, falls back to errno-style
    string matching for untyped OS errors.
    """
    if isinstance(error, UnicodeDecodeError):
        return ScanWarningKind.ENCODING
    if isinstance(error, PermissionError):
        return ScanWarningKind.PERMISSION

    msg = str(error).lower()
    if "permission denied" in msg or "eacces" in msg:
        return ScanWarningKind.PERMISSION
    if "codec" in msg or "decode" in msg:
        return ScanWarningKind.ENCODING
    return ScanWarningKind.IO
