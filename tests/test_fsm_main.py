import pytest

from FsmIO import load_automaton, save_automaton
from FsmMain import main


def test_demo_passes(capsys):
    assert main(["--demo"]) == 0
    out = capsys.readouterr().out
    assert "[OK]" in out
    assert "[FALLO]" not in out
    assert "AFD:   8 nodos" in out


def test_regex_with_words_and_dfa_out(tmp_path, capsys):
    target = tmp_path / "dfa.json"
    assert main(["--regex", "ab*", "--words", "a,abb,b,", "--dfa-out", str(target)]) == 0
    out = capsys.readouterr().out
    assert "abb -> AFN-ε: True | AFD: True" in out
    assert "b -> AFN-ε: False | AFD: False" in out
    assert load_automaton(str(target)).is_deterministic()


def test_json_source_and_check(tmp_path, demo_nfa, capsys):
    source = tmp_path / "nfa.json"
    save_automaton(demo_nfa, str(source))
    assert main(["--json", str(source), "--check", "50"]) == 0
    assert "50 coincidencias, 0 discrepancias" in capsys.readouterr().out


def test_png_output(tmp_path, capsys):
    assert main(["--regex", "a|b", "--png", str(tmp_path)]) == 0
    assert (tmp_path / "nfa.png").exists()
    assert (tmp_path / "dfa.png").exists()


def test_errors_exit_with_status_2(tmp_path, capsys):
    assert main(["--regex", "(a"]) == 2
    assert main(["--json", str(tmp_path / "missing.json")]) == 2
    bad = tmp_path / "bad.json"
    bad.write_text('{"nodes": [0], "start": 3}', encoding="utf-8")
    assert main(["--json", str(bad)]) == 2
    assert "error:" in capsys.readouterr().err


def test_source_is_required():
    with pytest.raises(SystemExit):
        main([])


def test_bad_json_documents_exit_with_status_2(tmp_path, capsys):
    null_transitions = tmp_path / "null.json"
    null_transitions.write_text('{"nodes": [0], "start": 0, "transitions": null}', encoding="utf-8")
    assert main(["--json", str(null_transitions)]) == 2
    latin = tmp_path / "latin.json"
    latin.write_bytes(b'{"nodes": [0], "start": 0, "x": "\xff\xfe"}')
    assert main(["--json", str(latin)]) == 2
    assert "error:" in capsys.readouterr().err


def test_multi_character_symbols_with_separator(tmp_path, capsys):
    source = tmp_path / "tokens.json"
    source.write_text(
        '{"nodes": [0, 1, 2], "start": 0, "goals": [2],'
        ' "transitions": [[0, "if", 1], [1, null, 0], [1, "then", 2]]}',
        encoding="utf-8",
    )
    assert main(["--json", str(source), "--words", "if then,if if then,then", "--sep", " "]) == 0
    out = capsys.readouterr().out
    assert "if if then -> AFN-ε: True | AFD: True" in out
    assert "then -> AFN-ε: False | AFD: False" in out
