"""Exception hierarchy for specgen.

All exceptions inherit from :class:`SpecgenError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`specgen.exit_codes`.
The top-level error handler in :func:`specgen.app.main` catches
``SpecgenError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Every error raised by the type-graph builder is fatal: a partially resolved
class graph is never handed to a code emitter.

Subclass hierarchy::

    SpecgenError (exit 1)
    +-- InvalidUsageError          (exit 2)
    +-- SpecParseError             (exit 7)
    +-- SchemaError                (exit 8)
    +-- CompositionError           (exit 9)
    +-- ResolutionError            (exit 11)
    +-- UnrecognizedLocationError  (exit 12)
    +-- InvariantError             (exit 13)
    +-- ConfigError                (exit 1)
"""

from specgen.exit_codes import (
    EXIT_COMPOSITION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_INVARIANT_ERROR,
    EXIT_RESOLUTION_ERROR,
    EXIT_SCHEMA_ERROR,
    EXIT_SPEC_PARSE_ERROR,
    EXIT_UNRECOGNIZED_LOCATION,
)


class SpecgenError(Exception):
    """Base exception for all specgen errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`specgen.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(SpecgenError):
    """Raised for invalid CLI arguments or missing required parameters."""

    exit_code = EXIT_INVALID_USAGE


class SpecParseError(SpecgenError):
    """Raised when the OpenAPI spec cannot be parsed or fails validation."""

    exit_code = EXIT_SPEC_PARSE_ERROR


class SchemaError(SpecgenError):
    """Raised when a ``$ref`` pointer cannot be found in the document at all.

    Distinct from a pointer that is merely still being built (a cycle), which
    is expected and handled with a placeholder.
    """

    exit_code = EXIT_SCHEMA_ERROR


class CompositionError(SpecgenError):
    """Raised when composed schemas declare the same field with incompatible types."""

    exit_code = EXIT_COMPOSITION_ERROR


class ResolutionError(SpecgenError):
    """Raised when a placeholder is still unresolved at reference-resolution time.

    Every placeholder handed out by the type registry must eventually be
    registered; a survivor indicates an internal consistency breach.
    """

    exit_code = EXIT_RESOLUTION_ERROR


class UnrecognizedLocationError(SpecgenError):
    """Raised when a parameter's ``in`` value does not map to a field location."""

    exit_code = EXIT_UNRECOGNIZED_LOCATION


class InvariantError(SpecgenError):
    """Raised when an operation passed the support filter but has no usable response."""

    exit_code = EXIT_INVARIANT_ERROR


class ConfigError(SpecgenError):
    """Raised for configuration problems (invalid JSON, unknown keys, bad values)."""

    exit_code = EXIT_GENERIC_FAILURE
