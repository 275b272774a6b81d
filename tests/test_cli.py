"""Tests for the latex-infix command line."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

import latex_infix.config as config
from latex_infix import cli


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    monkeypatch.setattr(config, "_ENV_FILE", tmp_path / ".env")
    monkeypatch.delenv("LATEX_INFIX_MODE", raising=False)


class TestHelpers:
    def test_parse_bindings(self):
        assert cli.parse_bindings("x=1, y=2.5") == {"x": 1.0, "y": 2.5}

    @pytest.mark.parametrize("spec", ["x", "=1", "x=one"])
    def test_parse_bindings_invalid(self, spec):
        with pytest.raises(ValueError):
            cli.parse_bindings(spec)

    def test_char_index_from_byte_offset(self):
        assert cli.char_index("abc", 2) == 2
        assert cli.char_index("π+x", 3) == 2


class TestTranslate:
    def test_prints_result(self, capsys):
        cli.main(["sinx", "xy"])
        out = capsys.readouterr().out
        assert "sin(x)" in out
        assert "x*y" in out
        assert "strict" in out

    def test_error_exits_with_caret(self, capsys):
        with pytest.raises(SystemExit) as excinfo:
            cli.main(["|x|+|y"])
        assert excinfo.value.code == 1
        out = capsys.readouterr().out
        assert "MalformedDelimiter" in out
        assert "    ^" in out
        assert "byte offset 4" in out

    def test_lenient_flag(self, capsys):
        cli.main(["--lenient", r"\alpha"])
        assert "a*l*p*h*a" in capsys.readouterr().out

    def test_mode_from_environment(self, capsys, monkeypatch):
        monkeypatch.setenv("LATEX_INFIX_MODE", "lenient")
        cli.main(["|x"])
        assert "lenient" in capsys.readouterr().out

    def test_strict_flag_overrides_environment(self, monkeypatch):
        monkeypatch.setenv("LATEX_INFIX_MODE", "lenient")
        with pytest.raises(SystemExit):
            cli.main(["--strict", "|x"])

    def test_evaluate_at_bindings(self, capsys):
        cli.main(["--at", "x=1,y=2", "x+y", r"\frac{x}{y}"])
        out = capsys.readouterr().out
        assert "Value" in out
        assert "3" in out
        assert "0.5" in out

    def test_missing_at_value(self):
        with pytest.raises(SystemExit) as excinfo:
            cli.main(["--at"])
        assert excinfo.value.code == 2

    def test_invalid_at_value(self):
        with pytest.raises(SystemExit) as excinfo:
            cli.main(["--at", "x", "x+1"])
        assert excinfo.value.code == 2

    def test_trace(self, capsys):
        cli.main(["--trace", r"\frac{1}{2}x"])
        out = capsys.readouterr().out
        assert "rewritten" in out
        assert "((1)/(2))*x" in out

    def test_help(self, capsys):
        cli.main(["--help"])
        assert "Usage: latex-infix" in capsys.readouterr().out


class TestInteractive:
    def test_prompt_loop(self, capsys):
        mock_questionary = MagicMock()
        mock_questionary.text.return_value.ask.side_effect = ["sinx", "|x", ""]
        with patch("latex_infix.cli.questionary", mock_questionary):
            cli.main([])
        out = capsys.readouterr().out
        assert "sin(x)" in out
        assert "MalformedDelimiter" in out
        assert mock_questionary.text.return_value.ask.call_count == 3

    def test_cancelled_prompt_exits(self, capsys):
        mock_questionary = MagicMock()
        mock_questionary.text.return_value.ask.return_value = None
        with patch("latex_infix.cli.questionary", mock_questionary):
            cli.main([])
        assert "empty line to quit" in capsys.readouterr().out
