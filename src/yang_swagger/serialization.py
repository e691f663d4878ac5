"""Encode a finished :class:`SwaggerDocument` as JSON or YAML.

Key order of the document is preserved in both encodings, so a sorted
document (see :func:`yang_swagger.postprocessor.sort_document`) always
renders to the same text.

Example:
        from yang_swagger.serialization import dumps

        text = dumps(document, "json")
"""

from __future__ import annotations

import json
from typing import IO, Any, Dict, Union

import yaml

from .config import Format
from .document import SwaggerDocument


def to_dict(document: SwaggerDocument) -> Dict[str, Any]:
    return document.to_dict()


def dumps(document: SwaggerDocument, fmt: Union[Format, str] = Format.YAML) -> str:
    """Render ``document`` in ``fmt`` (``yaml`` or ``json``)."""
    data = to_dict(document)
    if Format(fmt) == Format.JSON:
        return json.dumps(data, indent=2, ensure_ascii=False) + "\n"
    return yaml.safe_dump(data, sort_keys=False, default_flow_style=False, allow_unicode=True)


def dump(document: SwaggerDocument, fp: IO[str], fmt: Union[Format, str] = Format.YAML) -> None:
    fp.write(dumps(document, fmt))
