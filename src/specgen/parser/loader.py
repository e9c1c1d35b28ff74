"""Load OpenAPI documents from a URL, local file, or stdin.

JSON and YAML are both accepted. The format is guessed from the file
extension or the response ``content-type`` and otherwise detected by trying
JSON first: every JSON document is also YAML, but the JSON parser gives
sharper error messages.

* :func:`load_spec` -- fetch and parse a document from any supported source.
* :func:`validate_openapi_version` -- return the ``openapi`` version string,
  rejecting Swagger 2.x and anything that is not 3.x.
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any

import httpx
import yaml

from specgen.exceptions import SpecParseError

logger = logging.getLogger(__name__)

_SUFFIX_HINTS = {".json": "json", ".yaml": "yaml", ".yml": "yaml"}


def load_spec(source: str, timeout: float = 30.0) -> dict[str, Any]:
    """Load an OpenAPI document.

    Args:
        source: An ``http(s)://`` URL, a file path, or ``-`` for stdin.
        timeout: Network timeout in seconds for URL sources.

    Returns:
        The document as a dictionary.

    Raises:
        SpecParseError: If the source cannot be read or parsed.
    """
    if source == "-":
        content, hint = _read_stdin(), ""
    elif source.startswith(("http://", "https://")):
        content, hint = _fetch(source, timeout)
    else:
        content, hint = _read_file(source)

    if not content.strip():
        raise SpecParseError(f"Spec source is empty: {source}")
    logger.debug("Loaded %d characters from %s", len(content), source)
    return _parse_content(content, hint=hint)


def _read_stdin() -> str:
    try:
        return sys.stdin.read()
    except OSError as exc:
        raise SpecParseError(f"Failed to read from stdin: {exc}") from exc


def _fetch(url: str, timeout: float) -> tuple[str, str]:
    try:
        response = httpx.get(url, timeout=timeout, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise SpecParseError(
            f"HTTP {exc.response.status_code} fetching spec from {url}"
        ) from exc
    except httpx.RequestError as exc:
        raise SpecParseError(f"Failed to fetch spec from {url}: {exc}") from exc

    content_type = response.headers.get("content-type", "")
    if "json" in content_type:
        hint = "json"
    elif "yaml" in content_type or "yml" in content_type:
        hint = "yaml"
    else:
        hint = _SUFFIX_HINTS.get(Path(httpx.URL(url).path).suffix.lower(), "")
    return response.text, hint


def _read_file(path: str) -> tuple[str, str]:
    file_path = Path(path)
    if not file_path.is_file():
        raise SpecParseError(f"Spec file not found: {path}")
    try:
        content = file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise SpecParseError(f"Failed to read spec file {path}: {exc}") from exc
    return content, _SUFFIX_HINTS.get(file_path.suffix.lower(), "")


def _parse_content(content: str, hint: str = "") -> dict[str, Any]:
    """Parse *content* as JSON or YAML according to *hint*.

    With ``hint == "json"`` only JSON is tried, with ``"yaml"`` only YAML,
    and without a hint JSON and then YAML.

    Raises:
        SpecParseError: If no parser accepts the content, or the document
            is not a mapping.
    """
    errors: list[str] = []
    result: Any = None
    parsed = False

    if hint != "yaml":
        try:
            result, parsed = json.loads(content), True
        except json.JSONDecodeError as exc:
            if hint == "json":
                raise SpecParseError(f"Invalid JSON: {exc}") from exc
            errors.append(f"JSON error: {exc}")

    if not parsed:
        try:
            result, parsed = yaml.safe_load(content), True
        except yaml.YAMLError as exc:
            errors.append(f"YAML error: {exc}")

    if not parsed:
        raise SpecParseError(
            "Failed to parse spec as JSON or YAML\n  " + "\n  ".join(errors)
        )
    if not isinstance(result, dict):
        kind = type(result).__name__ if result is not None else "empty document"
        raise SpecParseError(f"Spec must be a JSON/YAML object (got {kind})")
    return result


def validate_openapi_version(spec: dict[str, Any]) -> str:
    """Return the document's OpenAPI version string.

    Any ``3.x`` version is accepted.

    Raises:
        SpecParseError: For Swagger 2.x, a missing ``openapi`` field, or a
            version other than 3.x.
    """
    if "swagger" in spec:
        raise SpecParseError(
            f"Swagger {spec['swagger']} is not supported. "
            "Only OpenAPI 3.0.x and 3.1.x are supported. "
            "Consider converting with https://converter.swagger.io"
        )

    version = spec.get("openapi")
    if version is None:
        raise SpecParseError("Missing 'openapi' field. Is this an OpenAPI 3.x document?")

    version_str = str(version)
    if not version_str.startswith("3."):
        raise SpecParseError(
            f"Unsupported OpenAPI version: {version_str}. "
            "Only OpenAPI 3.0.x and 3.1.x are supported."
        )
    return version_str
