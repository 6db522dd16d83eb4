import builtins

import pytest

import scicalc


def _feed(monkeypatch, lines):
    lines = iter(lines)

    def fake_input(prompt=""):
        try:
            return next(lines)
        except StopIteration:
            raise EOFError

    monkeypatch.setattr(builtins, "input", fake_input)


def test_one_shot_expression(capsys):
    assert scicalc.main(["-e", "5+8"]) == 0
    assert capsys.readouterr().out == "13\n"


def test_several_expressions_and_format(capsys):
    assert scicalc.main(["--format", "%.3f", "-e", "pi", "-e", "sqrt(2)"]) == 0
    assert capsys.readouterr().out == "3.142\n1.414\n"


def test_one_shot_error_sets_status(capsys):
    assert scicalc.main(["-e", "(1+2", "-e", "1+2"]) == 1
    captured = capsys.readouterr()
    assert captured.out == "3\n"
    assert "error: too many left parentheses" in captured.err


def test_legacy_prints_zero(capsys):
    assert scicalc.main(["--legacy", "--rpn", "-e", "(1+2"]) == 0
    assert capsys.readouterr().out == "0\n"


def test_strict_option(capsys):
    assert scicalc.main(["-e", "2 & 3"]) == 1
    assert scicalc.main(["--strict", "-e", "2 & 3"]) == 1
    assert "invalid character '&'" in capsys.readouterr().err


def test_rpn_option(capsys):
    assert scicalc.main(["--rpn", "-e", "5+8*2"]) == 0
    assert capsys.readouterr().out == "rpn: 5 8 2 * +\n21\n"


def test_repl(monkeypatch, capsys):
    _feed(monkeypatch, ["5+8", "", "fact(0-1)", "pow(2,3)"])
    assert scicalc.main(["--no-banner"]) == 0
    captured = capsys.readouterr()
    assert captured.out == "13\n8\n"
    assert "error: cannot calculate factorial of -1" in captured.err
    assert "caught EOF" in captured.err


def test_repl_banner_and_interrupt(monkeypatch, capsys):
    def interrupted(prompt=""):
        raise KeyboardInterrupt

    monkeypatch.setattr(builtins, "input", interrupted)
    assert scicalc.main([]) == 0
    err = capsys.readouterr().err
    assert "A Scientific" in err
    assert "interrupted" in err


def test_bad_option():
    with pytest.raises(SystemExit):
        scicalc.parse_args(["--no-such-option"])


@pytest.mark.parametrize("fmt", ["result", "%s %s", "%z"])
def test_invalid_format_is_rejected(fmt, capsys):
    with pytest.raises(SystemExit) as excinfo:
        scicalc.main(["--format", fmt, "-e", "1+1"])
    assert excinfo.value.code == 2
    assert "invalid --format" in capsys.readouterr().err


@pytest.mark.parametrize("expr", ["1/0", "0/0"])
def test_format_that_cannot_render_result(expr, capsys):
    assert scicalc.main(["--format", "%d", "-e", expr, "-e", "2.5"]) == 1
    captured = capsys.readouterr()
    assert captured.out == "2\n"
    assert "error:" in captured.err


def test_repl_survives_unrenderable_result(monkeypatch, capsys):
    _feed(monkeypatch, ["1/0", "3"])
    assert scicalc.main(["--no-banner", "--format", "%d"]) == 0
    captured = capsys.readouterr()
    assert captured.out == "3\n"
    assert "error: cannot convert float infinity to integer" in captured.err
