"""OpenAPI spec parser -- decode, validate, and extract endpoints.

This sub-package turns a raw OpenAPI 3.x document (JSON or YAML bytes) into a
:class:`~specsync.models.Spec` that the diff engine can consume.

Typical usage::

    from specsync.parser import parse_spec, read_source

    spec = parse_spec(read_source("openapi.yaml"))
    print(spec.info.title, len(spec.endpoints))

Sub-modules:

* :mod:`~specsync.parser.loader` -- JSON/YAML decoding, version
  normalisation, and the CLI's file/URL/stdin reader.
* :mod:`~specsync.parser.params` -- path/operation parameter merging.
* :mod:`~specsync.parser.templating` -- ``{id}`` to ``{{id}}`` rewriting.
* :mod:`~specsync.parser.security` -- effective security resolution.
* :mod:`~specsync.parser.extractor` -- walks the document and produces the
  :class:`~specsync.models.Spec`.
"""

from specsync.parser.extractor import parse_spec
from specsync.parser.loader import decode_document, normalize_openapi_version, read_source
from specsync.parser.params import merge_parameters
from specsync.parser.security import resolve_security
from specsync.parser.templating import convert_path_template

__all__ = [
    "parse_spec",
    "decode_document",
    "normalize_openapi_version",
    "read_source",
    "merge_parameters",
    "resolve_security",
    "convert_path_template",
]
