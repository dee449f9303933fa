import json
import sys
from pathlib import Path

import pytest
from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from ciams import ciams_cli


def test_run_ciams_string_ast(capsys: pytest.CaptureFixture[str]) -> None:
    status = ciams_cli.run_ciams(source="Init x = 1;", is_string=True)
    assert status == 0
    tree = json.loads(capsys.readouterr().out)
    assert tree["kind"] == "program"
    assert tree["body"][0]["kind"] == "init"
    assert tree["body"][0]["initializer"]["value"] == "1"


def test_run_ciams_tokens_mode(capsys: pytest.CaptureFixture[str]) -> None:
    status = ciams_cli.run_ciams(source="a + b", is_string=True, mode="tokens")
    assert status == 0
    tokens = json.loads(capsys.readouterr().out)
    assert [t["kind"] for t in tokens] == [
        "IDENTIFIER",
        "PLUS",
        "IDENTIFIER",
        "END_OF_STREAM",
    ]


def test_tokens_mode_does_not_need_valid_syntax(capsys: pytest.CaptureFixture[str]) -> None:
    assert ciams_cli.run_ciams(source="if (", is_string=True, mode="tokens") == 0
    assert "LPAREN" in capsys.readouterr().out


def test_run_ciams_pretty(capsys: pytest.CaptureFixture[str]) -> None:
    ciams_cli.run_ciams(source="Return;", is_string=True, pretty=True)
    out = capsys.readouterr().out
    assert '\n  "kind": "program"' in out


def test_run_ciams_file_input(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = tmp_path / "prog.ciams"
    path.write_text("while (x) { Break; }", encoding="utf-8")
    assert ciams_cli.run_ciams(source=str(path)) == 0
    assert json.loads(capsys.readouterr().out)["body"][0]["kind"] == "while"


def test_run_ciams_rejects_other_extensions(tmp_path: Path) -> None:
    path = tmp_path / "prog.txt"
    path.write_text("Return;", encoding="utf-8")
    with pytest.raises(ValueError, match="Only .ciams files are supported"):
        ciams_cli.run_ciams(source=str(path))


def test_run_ciams_output_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    out = tmp_path / "tree.json"
    assert ciams_cli.run_ciams(source="Free p;", is_string=True, out=str(out)) == 0
    assert capsys.readouterr().out == ""
    assert json.loads(out.read_text(encoding="utf-8"))["body"][0]["name"] == "p"


def test_run_ciams_syntax_error(capsys: pytest.CaptureFixture[str]) -> None:
    status = ciams_cli.run_ciams(source="if (x < 1 { Return; }", is_string=True)
    assert status == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert captured.err.startswith("error: Expected ')' after if condition at line 1")


def test_run_ciams_with_aliases(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    aliases = tmp_path / "aliases.json"
    aliases.write_text(json.dumps({"si": "IF"}), encoding="utf-8")
    status = ciams_cli.run_ciams(
        source="si (a) { }", is_string=True, aliases=str(aliases)
    )
    assert status == 0
    assert json.loads(capsys.readouterr().out)["body"][0]["kind"] == "if"


def test_run_ciams_bad_aliases(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    aliases = tmp_path / "aliases.json"
    aliases.write_text(json.dumps({"if": "WHILE"}), encoding="utf-8")
    status = ciams_cli.run_ciams(source="x = 1;", is_string=True, aliases=str(aliases))
    assert status == 1
    err = capsys.readouterr().err
    assert "Alias collision" in err
    assert "'if' -> conflict between IF and WHILE" in err


def test_main_string_mode(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setattr(sys, "argv", ["ciams", "-s", "x = 2;", "-m", "tokens"])
    with pytest.raises(SystemExit) as excinfo:
        ciams_cli.main()
    assert excinfo.value.code == 0
    assert '"ASSIGN"' in capsys.readouterr().out


def test_main_reports_missing_file(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    missing = tmp_path / "nope.ciams"
    monkeypatch.setattr(sys, "argv", ["ciams", str(missing)])
    with pytest.raises(SystemExit) as excinfo:
        ciams_cli.main()
    assert excinfo.value.code == 1
    assert capsys.readouterr().err.startswith("error:")


def test_main_parse_failure_exit_code(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setattr(sys, "argv", ["ciams", "-s", "else { }"])
    with pytest.raises(SystemExit) as excinfo:
        ciams_cli.main()
    assert excinfo.value.code == 1
    assert "keyword 'else'" in capsys.readouterr().err


def test_main_verbose_enables_debug_logging(
    monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    monkeypatch.setattr(sys, "argv", ["ciams", "-s", "x = 1;", "--verbose"])
    with caplog.at_level("DEBUG"):
        with pytest.raises(SystemExit):
            ciams_cli.main()
    assert any("Lexed" in rec.getMessage() for rec in caplog.records)
    assert any("Parsed 1 top-level statements" in rec.getMessage() for rec in caplog.records)


def test_run_ciams_long_operator_chain(capsys: pytest.CaptureFixture[str]) -> None:
    source = "Init x = " + " + ".join(["1"] * 5000) + ";"
    status = ciams_cli.run_ciams(source=source, is_string=True)
    captured = capsys.readouterr()
    if status == 0:
        assert captured.out.startswith('{"kind": "program", "body": [{"kind": "init"')
    else:
        assert status == 1
        assert captured.out == ""
        assert captured.err == "error: Syntax tree nested too deeply to serialize\n"


def test_run_ciams_deep_parens_report_error(capsys: pytest.CaptureFixture[str]) -> None:
    source = "x = " + "(" * 2000 + "1" + ")" * 2000 + ";"
    assert ciams_cli.run_ciams(source=source, is_string=True) == 1
    assert capsys.readouterr().err.startswith(
        "error: Expression or block nested too deeply at line 1"
    )


def test_run_ciams_list_aliases(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    aliases = tmp_path / "aliases.json"
    aliases.write_text(json.dumps({"si": "IF", "boucle": "LOOP"}), encoding="utf-8")
    status = ciams_cli.run_ciams(
        source="boucle { }", is_string=True, aliases=str(aliases), list_aliases=True
    )
    assert status == 0
    captured = capsys.readouterr()
    assert captured.err.splitlines() == [f"{'boucle':>12} -> LOOP", f"{'si':>12} -> IF"]
    assert json.loads(captured.out)["body"][0]["kind"] == "loop"


def test_main_list_aliases_flag(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    aliases = tmp_path / "aliases.json"
    aliases.write_text(json.dumps({"tant": "WHILE"}), encoding="utf-8")
    monkeypatch.setattr(
        sys, "argv", ["ciams", "-s", "Return;", "-a", str(aliases), "--list-aliases"]
    )
    with pytest.raises(SystemExit) as excinfo:
        ciams_cli.main()
    assert excinfo.value.code == 0
    assert "tant -> WHILE" in capsys.readouterr().err


@settings(suppress_health_check=[HealthCheck.function_scoped_fixture])  # type: ignore[misc]
@given(source=st.text())  # type: ignore[misc]
def test_run_ciams_random_input_does_not_crash(
    source: str, capsys: pytest.CaptureFixture[str]
) -> None:
    assert ciams_cli.run_ciams(source=source, is_string=True, mode="tokens") == 0
    tokens = json.loads(capsys.readouterr().out)
    assert tokens[-1] == {
        "kind": "END_OF_STREAM",
        "lexeme": "",
        "line": tokens[-1]["line"],
        "column": tokens[-1]["column"],
    }
    status = ciams_cli.run_ciams(source=source, is_string=True)
    assert status in (0, 1)
    capsys.readouterr()
