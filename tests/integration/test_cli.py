"""
Integration tests for the payloadmapper command-line interface.
"""
import json

import pytest

from payloadmapper.mapping.cli import build_parser, extract_files, main
from payloadmapper.mapping.loader import load_model

MODEL_YAML = """
templates:
  flow:
    additional: int.default:5
containers:
  user extends flow:
    fields:
      name as full_name: string
      age: int
      role: nope
    source:
      name: Karen
      age: "41"
  empty:
    fields: {}
"""


@pytest.fixture
def model_file(tmp_path):
    path = tmp_path / "model.yml"
    path.write_text(MODEL_YAML)
    return str(path)


@pytest.fixture
def data_files(tmp_path):
    first = tmp_path / "first.json"
    first.write_text(json.dumps({'name': 'Bob', 'age': 33}))
    second = tmp_path / "second.yml"
    second.write_text("name: Alice\nage: '29'\nadditional: 2\n")
    return [str(first), str(second)]


def run_cli(argv):
    with pytest.raises(SystemExit) as exc_info:
        main(argv)
    return exc_info.value.code


def test_parser_requires_command():
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_show_summary(model_file, capsys):
    assert run_cli(["show", model_file]) == 0
    out = capsys.readouterr().out

    assert "SUMMARY - 2 Containers, 1 Templates" in out
    assert "Templates: flow" in out
    assert "Container: user" in out
    assert "output:     full_name" in out


def test_show_single_container(model_file, capsys):
    assert run_cli(["show", model_file, "-c", "user"]) == 0
    out = capsys.readouterr().out

    assert "Container: user" in out
    assert "Container: empty" not in out
    assert "processors: int.default:5" in out


def test_show_unknown_container(model_file, capsys):
    assert run_cli(["show", model_file, "-c", "ghost"]) == 1
    assert "Container 'ghost' not found" in capsys.readouterr().out


def test_missing_model_file(tmp_path, capsys):
    assert run_cli(["show", str(tmp_path / "nope.yml")]) == 1
    assert "Error:" in capsys.readouterr().out


def test_extract_inline_source_as_json(model_file, capsys):
    assert run_cli(["extract", model_file, "-c", "user", "--json"]) == 0
    out = capsys.readouterr().out

    assert "Unregistered processor" in out
    payload = json.loads(out[out.index("{"):])
    assert payload == {'additional': 5, 'full_name': 'Karen', 'age': 41, 'role': 'UNDEFINED'}


def test_extract_data_files(model_file, data_files, capsys):
    assert run_cli(["extract", model_file, "-c", "user", "-d", data_files[0], "-d", data_files[1]]) == 0
    out = capsys.readouterr().out

    assert "full_name: 'Bob'" in out
    assert "full_name: 'Alice'" in out
    assert "additional: 2" in out
    assert "age: 29" in out


def test_extract_with_missing_data_file(model_file, data_files, tmp_path, capsys):
    missing = str(tmp_path / "missing.json")
    assert run_cli(["extract", model_file, "-c", "user", "-d", data_files[0], "-d", missing]) == 1
    out = capsys.readouterr().out

    assert "Failed extractions (1)" in out
    assert missing in out


def test_extract_unknown_container(model_file, capsys):
    assert run_cli(["extract", model_file, "-c", "ghost"]) == 1


def test_extract_with_parent(tmp_path, capsys):
    model_path = tmp_path / "model.yml"
    model_path.write_text("containers:\n  c:\n    fields:\n      \"^.form.name\": upper\n")
    parent_path = tmp_path / "parent.json"
    parent_path.write_text(json.dumps({'form': {'name': 'karen'}}))

    assert run_cli(["extract", str(model_path), "-c", "c", "-p", str(parent_path), "--json"]) == 0
    assert json.loads(capsys.readouterr().out) == {'name': 'KAREN'}


def test_extract_files_collects_warnings(model_file, data_files):
    model = load_model(model_file)
    run = extract_files(model, "user", data_files)

    assert run.total == 2
    assert run.extracted == 2
    assert not run.has_failures
    assert [p['fields']['full_name'] for p in run.payloads] == ['Bob', 'Alice']
    assert len(run.warnings) == 2
    assert all("nope" in w['message'] for w in run.warnings)
