"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~specgen.exceptions.SpecgenError` subclass.
External tooling (CI scripts, build wrappers) can inspect the exit code to
determine the failure class without parsing stderr.

Example::

    $ specgen generate openapi.json -o model.json
    $ echo $?
    9   # EXIT_COMPOSITION_ERROR -- allOf members disagree on a field type
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing required parameters."""

EXIT_SPEC_PARSE_ERROR = 7
"""The OpenAPI specification could not be parsed or validated."""

EXIT_SCHEMA_ERROR = 8
"""A ``$ref`` pointer does not resolve anywhere in the document."""

EXIT_COMPOSITION_ERROR = 9
"""Composed schemas declare the same field with incompatible types."""

EXIT_RESOLUTION_ERROR = 11
"""A class placeholder was still unresolved when references were resolved."""

EXIT_UNRECOGNIZED_LOCATION = 12
"""A parameter declares a location outside path/query/header/body/cookie."""

EXIT_INVARIANT_ERROR = 13
"""A supported operation has no usable success response."""
