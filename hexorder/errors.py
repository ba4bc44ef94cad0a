"""
Hexorder Error Hierarchy

Exceptions are reserved for API misuse at the registry and configuration
seams. Schema problems and blocked moves are reported as data
(``SchemaValidation`` / ``ValidMoveSet``) and never raised.

Usage:
    from hexorder.errors import UnknownReferenceError

    try:
        relations.remove_relation(relation_id)
    except UnknownReferenceError as e:
        logger.warning(f"Relation already gone: {e.message}")
"""

from typing import Any

__all__ = [
    "ConfigurationError",
    "DuplicateIdentifierError",
    # Base error
    "HexorderError",
    # Registry errors
    "RegistryError",
    "UnknownReferenceError",
]


class HexorderError(Exception):
    """Base exception for all hexorder errors.

    Attributes:
        code: Machine-readable error code for categorization
        message: Human-readable error description
        context: Additional context for debugging
    """
    code: str = "HEXORDER_ERROR"

    def __init__(
        self,
        message: str,
        code: str | None = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            ctx = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"[{self.code}] {self.message} ({ctx})"
        return f"[{self.code}] {self.message}"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "code": self.code,
            "message": self.message,
            "context": self.context,
        }


# =============================================================================
# Registry Errors
# =============================================================================


class RegistryError(HexorderError):
    """Base class for registry lookup and mutation errors."""
    code: str = "REGISTRY_ERROR"


class UnknownReferenceError(RegistryError):
    """An identifier does not name anything in the registry.

    Raised by the ``require_*``, ``update_*`` and ``remove_*`` helpers.
    Plain lookups (``get``) return ``None`` instead.

    Attributes:
        kind: What was being looked up (e.g. "relation", "concept")
        reference_id: The identifier that failed to resolve
    """
    code: str = "UNKNOWN_REFERENCE"

    def __init__(
        self,
        message: str,
        kind: str | None = None,
        reference_id: Any = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(message, context=context)
        self.kind = kind
        self.reference_id = reference_id
        if kind:
            self.context["kind"] = kind
        if reference_id is not None:
            self.context["reference_id"] = str(reference_id)


class DuplicateIdentifierError(RegistryError):
    """A definition was added with an id that is already registered.

    Identifiers are never reused, so a second insert with the same id is
    always a caller bug.
    """
    code: str = "DUPLICATE_IDENTIFIER"

    def __init__(
        self,
        message: str,
        reference_id: Any = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(message, context=context)
        self.reference_id = reference_id
        if reference_id is not None:
            self.context["reference_id"] = str(reference_id)


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(HexorderError):
    """Invalid environment configuration."""
    code: str = "CONFIGURATION_ERROR"

    def __init__(
        self,
        message: str,
        setting: str | None = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(message, context=context)
        if setting:
            self.context["setting"] = setting
