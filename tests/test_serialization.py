import io
import json
from pathlib import Path

import yaml

from yang_swagger.config import Format, GeneratorConfig
from yang_swagger.generator import SwaggerGenerator
from yang_swagger.schema_loader import load_schema
from yang_swagger.serialization import dump, dumps

FIXTURE = Path(__file__).resolve().parent / "fixtures" / "schema" / "device.json"


def _document():
    return SwaggerGenerator(load_schema(FIXTURE), ["device"]).generate()


def test_json_output():
    document = _document()
    data = json.loads(dumps(document, Format.JSON))
    assert data == document.to_dict()
    assert list(data)[:2] == ["swagger", "info"]


def test_yaml_output_keeps_key_order():
    document = _document()
    text = dumps(document, "yaml")
    assert text.startswith("swagger: '2.0'\n")
    assert yaml.safe_load(text) == document.to_dict()


def test_dump_writes_to_stream():
    buffer = io.StringIO()
    dump(_document(), buffer, Format.JSON)
    assert json.loads(buffer.getvalue())["basePath"] == "/restconf"


def test_generator_write_uses_configured_format():
    buffer = io.StringIO()
    SwaggerGenerator(load_schema(FIXTURE), ["device"], GeneratorConfig(format=Format.JSON)).write(buffer)
    data = json.loads(buffer.getvalue())
    assert list(data["paths"]) == sorted(data["paths"])
