"""OpenAPI spec parser -- load a document and extract operations and schemas.

This sub-package is responsible for the first half of the specgen pipeline:
turning a raw OpenAPI 3.x document (JSON or YAML, local file or remote URL) into
a :class:`~specgen.models.ParsedSpec` that the endpoint assembler can consume.

Typical usage::

    from specgen.parser import load_spec, validate_openapi_version, extract_spec

    raw = load_spec("api.github.com.json")
    version = validate_openapi_version(raw)
    parsed = extract_spec(raw, version)

Sub-modules:

* :mod:`~specgen.parser.loader` -- I/O layer (URL, file, stdin) plus format
  detection and OpenAPI version validation.
* :mod:`~specgen.parser.resolver` -- JSON pointer lookup for internal
  ``$ref`` strings.
* :mod:`~specgen.parser.extractor` -- Walks the document and produces
  :class:`~specgen.models.ParsedSpec` with its pointer-indexed schema table.
"""

from specgen.parser.extractor import extract_spec
from specgen.parser.loader import load_spec, validate_openapi_version
from specgen.parser.resolver import resolve_pointer

__all__ = ["load_spec", "validate_openapi_version", "extract_spec", "resolve_pointer"]
