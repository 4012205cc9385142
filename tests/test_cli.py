import json
from pathlib import Path

from qforge.cli import main
from qforge.errors import ExitCode


def _write(tmp_path: Path, name: str, text: str) -> str:
    p = tmp_path / name
    p.write_text(text, encoding="utf-8")
    return str(p)


def test_build_text(tmp_path: Path, capsys):
    doc = _write(tmp_path, "q.yaml", "dialect: postgres\ntable: users\nwhere:\n  id: 5\n")
    rc = main(["build", "--query", doc])
    out = capsys.readouterr().out.splitlines()
    assert rc == ExitCode.OK
    assert out == ["SELECT * FROM users WHERE id = $1", "-- params: [5]"]


def test_build_json_with_dialect_override_and_out_file(tmp_path: Path, capsys):
    doc = _write(tmp_path, "q.yaml", "match: ['(n:Person)']\nreturn: [n]\nlimit: 3\n")
    out_path = tmp_path / "out" / "result.json"
    rc = main(["build", "--query", doc, "--dialect", "cypher", "--format", "json", "--out", str(out_path)])
    payload = json.loads(capsys.readouterr().out)
    assert rc == ExitCode.OK
    assert payload["ok"] is True
    assert payload["query"] == "MATCH (n:Person)\nRETURN n\nLIMIT $limit1"
    assert payload["params"] == {"limit1": 3}
    written = json.loads(out_path.read_text(encoding="utf-8"))
    assert written["metadata"]["fingerprint"] == payload["metadata"]["fingerprint"]


def test_build_with_config_marker(tmp_path: Path, capsys):
    cfg = _write(tmp_path, "cfg.yaml", "builder:\n  default_page_size: 4\n")
    doc = _write(tmp_path, "q.yaml", "dialect: postgres\ntable: t\npage: 1\n")
    rc = main(["build", "--query", doc, "--config", cfg, "--format", "jsonl"])
    payload = json.loads(capsys.readouterr().out)
    assert rc == ExitCode.OK
    assert payload["params"] == [4, 0]


def test_build_missing_document(tmp_path: Path, capsys):
    rc = main(["build", "--query", str(tmp_path / "nope.yaml"), "--format", "json"])
    payload = json.loads(capsys.readouterr().out)
    assert rc == ExitCode.CONFIG_INVALID
    assert payload["ok"] is False
    assert payload["error"]["code"] == "QFORGE_DOCUMENT_NOT_FOUND"


def test_build_invalid_identifier_reports_to_stderr(tmp_path: Path, capsys):
    doc = _write(tmp_path, "q.yaml", "dialect: postgres\ntable: 'users; DROP TABLE users'\n")
    rc = main(["build", "--query", doc])
    err = capsys.readouterr().err
    assert rc == ExitCode.INVALID_INPUT
    assert "ERROR[QFORGE_INVALID_IDENTIFIER]" in err


def test_build_unknown_dialect(tmp_path: Path, capsys):
    doc = _write(tmp_path, "q.yaml", "table: t\n")
    rc = main(["build", "--query", doc, "--dialect", "oracle", "--format", "json"])
    payload = json.loads(capsys.readouterr().out)
    assert rc == ExitCode.CONFIG_INVALID
    assert payload["error"]["code"] == "QFORGE_UNKNOWN_DIALECT"


def test_check_identifier(capsys):
    assert main(["check-identifier", "users", "user_id"]) == ExitCode.OK
    assert capsys.readouterr().out.splitlines() == ["OK: users", "OK: user_id"]

    rc = main(["check-identifier", "users", "bad-name", "--format", "json"])
    payload = json.loads(capsys.readouterr().out)
    assert rc == ExitCode.INVALID_INPUT
    assert payload == {"ok": False, "identifiers": {"users": True, "bad-name": False}}


def test_dialects(capsys):
    assert main(["dialects"]) == ExitCode.OK
    out = capsys.readouterr().out.splitlines()
    assert "cypher\tparamstyle=named_dollar" in out
    assert "postgres\tparamstyle=numeric_dollar" in out


def test_no_command_prints_help(capsys):
    assert main([]) == 2
    assert "usage" in capsys.readouterr().out


def test_build_join_without_on_is_an_input_error(tmp_path: Path, capsys):
    doc = _write(tmp_path, "q.yaml", "dialect: postgres\ntable: users\njoins:\n  - {table: orders}\n")
    rc = main(["build", "--query", doc, "--format", "json"])
    payload = json.loads(capsys.readouterr().out)
    assert rc == ExitCode.INVALID_INPUT
    assert payload["error"]["code"] == "QFORGE_DOCUMENT_MISSING_KEY"
    assert payload["error"]["details"] == {"key": "on", "section": "join"}
