"""
Tests for the command-line front end.
"""

import io
import json
import re

import pytest

from main import (
    EXIT_INPUT_ERROR, EXIT_OK, EXIT_USAGE, RunConfig, config_from_args, format_mos,
    format_result, main, run,
)
from params import G107_DEFAULTS

R_LINE = re.compile(r"^R = (\d+\.\d{6})$", re.MULTILINE)


def _run(config, stdin_text=""):
    out, err = io.StringIO(), io.StringIO()
    code = run(config, stdin=io.StringIO(stdin_text), stdout=out, stderr=err)
    return code, out.getvalue(), err.getvalue()


class TestArguments:

    def test_flags(self):
        cfg = config_from_args(["-f", "x.json", "-v", "--mos", "--strict", "--log-level", "DEBUG"])
        assert cfg == RunConfig(input_path="x.json", use_stdin=False, verbose=True,
                                show_mos=True, strict=True, log_level="DEBUG")

    def test_defaults(self):
        cfg = config_from_args([])
        assert cfg == RunConfig()
        assert not cfg.has_source

    def test_stdin_flag(self):
        assert config_from_args(["--stdin"]).has_source


class TestRun:

    def test_file(self, params_file):
        code, out, err = _run(RunConfig(input_path=str(params_file)))
        assert code == EXIT_OK
        assert err == ""
        m = R_LINE.search(out)
        assert m and float(m.group(1)) == pytest.approx(93.2, abs=0.05)
        assert out.strip().splitlines() == [m.group(0)]

    def test_stdin(self, defaults_json):
        code, out, _ = _run(RunConfig(use_stdin=True), stdin_text=defaults_json)
        assert code == EXIT_OK
        assert R_LINE.search(out)

    def test_stdin_wins_over_file(self, tmp_path, defaults_json):
        code, out, _ = _run(RunConfig(input_path=str(tmp_path / "missing.json"), use_stdin=True),
                            stdin_text=defaults_json)
        assert code == EXIT_OK

    def test_no_source(self):
        code, out, err = _run(RunConfig())
        assert code == EXIT_USAGE
        assert out == ""
        assert "usage:" in err

    def test_missing_file(self, tmp_path):
        code, out, err = _run(RunConfig(input_path=str(tmp_path / "missing.json")))
        assert code == EXIT_INPUT_ERROR
        assert out == ""
        assert err.startswith("error: cannot open")

    def test_bad_json(self):
        code, _, err = _run(RunConfig(use_stdin=True), stdin_text="not json")
        assert code == EXIT_INPUT_ERROR
        assert "malformed JSON" in err

    def test_invalid_utf8_file(self, tmp_path):
        path = tmp_path / "link.json"
        path.write_bytes(b'{"SLR": \xff}')
        code, out, err = _run(RunConfig(input_path=str(path)))
        assert code == EXIT_INPUT_ERROR
        assert out == ""
        assert "not valid UTF-8" in err

    def test_integer_beyond_float_range(self):
        text = json.dumps({**G107_DEFAULTS, "A": "HUGE"}).replace('"HUGE"', "9"*400)
        code, out, err = _run(RunConfig(use_stdin=True), stdin_text=text)
        assert code == EXIT_INPUT_ERROR
        assert out == ""
        assert "out of float range" in err

    def test_default_streams(self, params_file, capsys):
        assert run(RunConfig(input_path=str(params_file))) == EXIT_OK
        captured = capsys.readouterr()
        assert R_LINE.search(captured.out)
        assert captured.err == ""

    def test_verbose(self, params_file):
        code, out, _ = _run(RunConfig(input_path=str(params_file), verbose=True))
        assert code == EXIT_OK
        assert out.startswith("Input parameters: {")
        echoed = json.loads(out[len("Input parameters: "):out.index("}") + 1])
        assert echoed == G107_DEFAULTS
        assert re.search(r"^Ro\s+= 94\.7", out, re.MULTILINE)
        assert out.rstrip().splitlines()[-1].startswith("R = ")

    def test_mos(self, params_file):
        code, out, _ = _run(RunConfig(input_path=str(params_file), show_mos=True))
        assert code == EXIT_OK
        assert out.rstrip().splitlines()[-1] == "MOS = 4.41"

    def test_permissive_by_default(self):
        text = json.dumps({**G107_DEFAULTS, "Qdu": -1.0})
        code, out, _ = _run(RunConfig(use_stdin=True), stdin_text=text)
        assert code == EXIT_OK
        assert out.strip() == "R = nan"

    def test_strict_rejects_out_of_range(self):
        text = json.dumps({**G107_DEFAULTS, "Qdu": -1.0})
        code, out, err = _run(RunConfig(use_stdin=True, strict=True), stdin_text=text)
        assert code == EXIT_INPUT_ERROR
        assert out == ""
        assert "Qdu=-1 outside permitted range" in err


class TestMain:

    def test_main_file(self, params_file, capsys):
        assert main(["-f", str(params_file)]) == EXIT_OK
        assert R_LINE.search(capsys.readouterr().out)

    def test_main_no_args(self, capsys):
        assert main([]) == EXIT_USAGE
        assert "usage:" in capsys.readouterr().err


class TestFormatting:

    def test_result(self):
        assert format_result(93.20657) == "R = 93.206570"

    def test_mos(self):
        assert format_mos(4.409286) == "MOS = 4.41"
