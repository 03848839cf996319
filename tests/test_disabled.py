"""Tests for the disabled (null) implementations and the build switch."""

import os
import subprocess
import sys
import textwrap

import pytest
from beartype.roar import BeartypeCallHintParamViolation

import perfscope
from perfscope import _clock, _config, _core, _null
from perfscope._core import IOBytesDelta


class CountingCounter:
    def __init__(self, value: int = 0) -> None:
        self._value = value
        self.reads = 0

    @property
    def value(self) -> int:
        self.reads += 1
        return self._value


@pytest.fixture
def forbid_clock(monkeypatch):
    """Fail the test on any clock read."""

    def _no_clock(*args):
        raise AssertionError("clock was read")

    monkeypatch.setattr(_clock, "now", _no_clock)
    monkeypatch.setattr(_clock, "ms_since", _no_clock)


# ---------------------------------------------------------------------------
# parse_flag
# ---------------------------------------------------------------------------

class TestParseFlag:
    @pytest.mark.parametrize("raw", [None, "", "   ", "1", "true", "YES", " on "])
    def test_enabled_values(self, raw):
        assert _config.parse_flag(raw) is True

    @pytest.mark.parametrize("raw", ["0", "false", "No", "OFF"])
    def test_disabled_values(self, raw):
        assert _config.parse_flag(raw) is False

    def test_unknown_value_raises(self):
        with pytest.raises(ValueError, match="Unrecognized"):
            _config.parse_flag("maybe")


# ---------------------------------------------------------------------------
# Implementation selection
# ---------------------------------------------------------------------------

def _run_with_flag(value: str, code: str) -> subprocess.CompletedProcess:
    env = dict(os.environ, PERFSCOPE_ENABLE_PERF=value)
    return subprocess.run(
        [sys.executable, "-c", textwrap.dedent(code)],
        env=env,
        capture_output=True,
        text=True,
        timeout=60,
    )


class TestSelection:
    def test_public_names_match_resolved_flag(self):
        impl = _core if perfscope.ENABLE_PERF else _null
        assert perfscope.IOScope is impl.IOScope
        assert perfscope.MultiIOScope is impl.MultiIOScope
        assert perfscope.ScopedTimer is impl.ScopedTimer
        assert perfscope.StageTimer is impl.StageTimer

    def test_disabled_process_binds_null_and_prints_nothing(self):
        result = _run_with_flag(
            "0",
            """
            import ctypes
            import perfscope
            from perfscope import _null

            assert not perfscope.ENABLE_PERF
            assert perfscope.IOScope is _null.IOScope
            counter = ctypes.c_uint64(0)
            with perfscope.IOScope(counter, "io"), perfscope.ScopedTimer("t"):
                counter.value += 10
            perfscope.StageTimer("stage", prefix=">>").done()
            perfscope.print_line("never\\n")
            """,
        )
        assert result.returncode == 0, result.stderr
        assert result.stdout == ""
        assert "[io]" not in result.stderr

    def test_enabled_process_binds_real_scopes(self):
        result = _run_with_flag(
            "1",
            """
            import perfscope
            from perfscope import _core

            assert perfscope.ENABLE_PERF
            assert perfscope.StageTimer is _core.StageTimer
            perfscope.StageTimer("stage")
            """,
        )
        assert result.returncode == 0, result.stderr
        assert result.stdout == "\nstage\n"

    def test_unknown_flag_fails_import(self):
        result = _run_with_flag("maybe", "import perfscope")
        assert result.returncode != 0
        assert "Unrecognized PERFSCOPE_ENABLE_PERF" in result.stderr


# ---------------------------------------------------------------------------
# Null implementations
# ---------------------------------------------------------------------------

class TestNullScopes:
    def test_io_scope_never_reads_counter(self, capsys, forbid_clock):
        counter = CountingCounter(1000)
        with _null.IOScope(counter, "labelled") as scope:
            pass

        assert counter.reads == 0
        assert scope.finished
        assert scope.finish() == IOBytesDelta()
        assert capsys.readouterr().err == ""

    def test_multi_io_scope_never_calls_reader(self, capsys, forbid_clock):
        def reader() -> int:
            raise AssertionError("reader was called")

        scope = _null.MultiIOScope(reader, "agg")
        assert scope.delta is None
        assert scope.finish().bytes() == 0
        assert scope.delta == IOBytesDelta()
        scope.close()
        assert capsys.readouterr().err == ""

    def test_scoped_timer_is_silent(self, capsys, forbid_clock):
        with _null.ScopedTimer("quiet") as timer:
            pass

        assert timer.elapsed_ms == 0.0
        assert capsys.readouterr().out == ""

    def test_stage_timer_is_silent(self, capsys, forbid_clock):
        stage = _null.StageTimer("quiet", prefix="[1/1]")
        assert stage.done() == 0.0
        assert stage.done() == 0.0
        assert capsys.readouterr().out == ""

    def test_clock_and_output_are_inert(self, capsys, forbid_clock):
        assert _null.now() == 0.0
        assert _null.ms_since(_null.now()) == 0.0
        _null.print_line("nothing\n")
        _null.print_line("nothing\n", sys.stderr)

        captured = capsys.readouterr()
        assert captured.out == ""
        assert captured.err == ""

    def test_label_property(self):
        assert _null.IOScope(None, "kept").label == "kept"

    @pytest.mark.parametrize(
        "build",
        [
            lambda: _null.IOScope(1000, "bad"),
            lambda: _null.MultiIOScope(42, "bad"),
            lambda: _null.ScopedTimer(3),
            lambda: _null.StageTimer("stage", prefix=7),
        ],
        ids=["io-scope", "multi-io-scope", "scoped-timer", "stage-timer"],
    )
    def test_beartype_rejects_bad_arguments_like_real_scopes(self, build):
        with pytest.raises(BeartypeCallHintParamViolation):
            build()
