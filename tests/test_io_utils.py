import json
from pathlib import Path

import pytest

from eword.io_utils import load_fields, save_fields


def test_load_fields_from_json(tmp_path: Path) -> None:
    path = tmp_path / "fields.json"
    path.write_text(
        json.dumps({"fields": ["Subject: Grüße", "To: a@b"], "extra": True}),
        encoding="utf-8",
    )

    fields = load_fields(str(path))

    assert fields == ["Subject: Grüße", "To: a@b"]


def test_load_fields_from_header_block(tmp_path: Path) -> None:
    path = tmp_path / "header.txt"
    path.write_text("Subject: Grüße\n aus Köln\nTo: a@b\n\nbody text\n", encoding="utf-8")

    fields = load_fields(str(path))

    assert fields == ["Subject: Grüße\n aus Köln", "To: a@b"]


def test_load_fields_reports_structure_errors(tmp_path: Path) -> None:
    bad_path = tmp_path / "bad.json"
    bad_path.write_text(json.dumps({"not_fields": []}), encoding="utf-8")

    with pytest.raises(TypeError):
        load_fields(str(bad_path))

    bad_path.write_text(json.dumps({"fields": ["To: a@b", 3]}), encoding="utf-8")

    with pytest.raises(TypeError):
        load_fields(str(bad_path))


def test_load_fields_reports_invalid_json(tmp_path: Path) -> None:
    bad_path = tmp_path / "bad.json"
    bad_path.write_text("{not json", encoding="utf-8")

    with pytest.raises(ValueError):
        load_fields(str(bad_path))


def test_load_fields_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_fields(str(tmp_path / "missing.json"))


def test_save_fields_writes_expected_structure(tmp_path: Path) -> None:
    out_path = tmp_path / "out.json"

    save_fields(str(out_path), ["Subject: =?UTF-8?B?8J+YgA==?=", "To: Jörg <j@x>"])

    data = json.loads(out_path.read_text(encoding="utf-8"))

    assert data["fields"][0] == "Subject: =?UTF-8?B?8J+YgA==?="
    assert "Jörg" in out_path.read_text(encoding="utf-8")
