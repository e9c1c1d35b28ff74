"""End-to-end generation: document source in, resolved class graph out.

Shared by the ``generate`` and ``inspect`` commands and usable on its own::

    from specgen.pipeline import generate_from_source

    result = generate_from_source("api.github.com.json")
"""

from __future__ import annotations

import logging
from typing import Optional

from specgen.assembler import EndpointAssembler
from specgen.models import GeneratorConfig, ParsedSpec
from specgen.naming import Namer
from specgen.parser import extract_spec, load_spec, validate_openapi_version
from specgen.typegraph.model import GenerationResult

logger = logging.getLogger(__name__)


def parse_source(source: str, config: Optional[GeneratorConfig] = None) -> ParsedSpec:
    """Load, validate, and extract the document at *source*.

    Raises:
        SpecParseError: If the document cannot be loaded or is not OpenAPI 3.
        SchemaError: If a parameter or response ``$ref`` cannot be followed.
    """
    raw = load_spec(source)
    version = validate_openapi_version(raw)
    spec = extract_spec(raw, version, config)
    logger.debug(
        "Parsed %s %s (OpenAPI %s): %d operation(s), %d schema pointer(s)",
        spec.info.title,
        spec.info.version,
        version,
        len(spec.operations),
        len(spec.schemas),
    )
    return spec


def generate_from_source(
    source: str,
    config: Optional[GeneratorConfig] = None,
    namer: Optional[Namer] = None,
) -> GenerationResult:
    """Run the full pipeline over the document at *source*.

    Raises:
        SpecgenError: Any parse, build, or resolution failure; see
            :mod:`specgen.exceptions`.
    """
    config = config or GeneratorConfig()
    spec = parse_source(source, config)
    return EndpointAssembler(config, namer).build(spec)
