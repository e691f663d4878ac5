import json
from pathlib import Path

import pytest
import yaml

from yang_swagger.cli import main

FIXTURES = Path(__file__).resolve().parent / "fixtures" / "schema"
DEVICE = str(FIXTURES / "device.json")


def test_generate_to_stdout(capsys):
    assert main(["generate", DEVICE, "-m", "device", "--format", "json"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert "/data/device:interfaces" in data["paths"]
    assert data["info"]["version"] == "1.0.0-SNAPSHOT"


def test_generate_to_file_with_options(tmp_path, capsys):
    target = tmp_path / "device.yaml"
    code = main(
        [
            "generate",
            DEVICE,
            "-m",
            "device",
            "-o",
            str(target),
            "--max-depth",
            "1",
            "--strategy",
            "unpacking",
            "--elements",
            "data",
            "--host",
            "router.example:443",
            "--api-version",
            "2.1.0",
            "--module-tags",
        ]
    )
    assert code == 0
    assert "✓ Wrote swagger for device" in capsys.readouterr().out

    data = yaml.safe_load(target.read_text(encoding="utf-8"))
    assert set(data["paths"]) == {"/data/device:interfaces", "/data/device:routing", "/data/device:state"}
    assert data["host"] == "router.example:443"
    assert data["info"]["version"] == "2.1.0"
    assert data["paths"]["/data/device:state"]["get"]["tags"] == ["state", "device"]


def test_generate_unknown_module(capsys):
    assert main(["generate", DEVICE, "-m", "missing"]) == 1
    assert "✗ Failed to generate swagger" in capsys.readouterr().out


def test_generate_missing_schema_file(tmp_path, capsys):
    assert main(["generate", str(tmp_path / "absent.json"), "-m", "device"]) == 1
    assert "✗" in capsys.readouterr().out


def test_invalid_depth_is_rejected():
    with pytest.raises(SystemExit):
        main(["generate", DEVICE, "-m", "device", "--max-depth", "0"])


def test_modules_command(capsys):
    assert main(["modules", str(FIXTURES / "augment.yaml")]) == 0
    out = capsys.readouterr().out
    assert "system: 1 data nodes, 0 rpcs" in out
    assert "ntp: 0 data nodes, 0 rpcs" in out


def test_no_command_prints_help(capsys):
    assert main([]) == 1
    assert "usage: yang-swagger" in capsys.readouterr().out
