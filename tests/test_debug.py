import io
from unittest import mock

import pytest

from pkcs11cert import debug


class _TtyStream(io.StringIO):
    def isatty(self):
        return True


@pytest.fixture(autouse=True)
def _restore_level():
    saved = debug.get_debug_level()
    yield
    debug.set_debug_level(saved)


@pytest.fixture
def tty(monkeypatch):
    stream = _TtyStream()
    monkeypatch.setattr("sys.stdout", stream)
    return stream


def test_level_round_trip():
    debug.set_debug_level(5)
    assert debug.get_debug_level() == 5
    debug.set_debug_level(0)
    assert debug.get_debug_level() == 0


def test_debug_message_on_tty_has_green_preamble(tty):
    debug.set_debug_level(1)
    result = debug.debug_print(debug.DEBUG, "file.c", 10, "value=%d", 42)
    assert result == "value=42"
    assert tty.getvalue() == "\033[32mDEBUG:file.c:10: value=42\033[0m\n"


def test_error_message_on_tty_is_red(tty):
    debug.set_debug_level(0)
    result = debug.debug_print(debug.ERROR, "x.c", 3, "failed")
    assert result == "failed"
    assert tty.getvalue() == "\033[31mERROR:x.c:3: failed\033[0m\n"


def test_message_above_level_is_filtered(tty):
    debug.set_debug_level(0)
    assert debug.debug_print(debug.DEBUG, "x.c", 1, "hidden") is None
    assert tty.getvalue() == ""


def test_format_without_args_is_literal(tty):
    debug.set_debug_level(1)
    assert debug.debug_print(debug.DEBUG, "x.c", 1, "100% sure") == "100% sure"


def test_non_tty_goes_to_syslog_truncated(monkeypatch):
    monkeypatch.setattr("sys.stdout", io.StringIO())
    debug.set_debug_level(1)
    long_text = "a" * 250
    with mock.patch("syslog.syslog") as fake:
        result = debug.debug_print(debug.DEBUG, "x.c", 1, "%s", long_text)
    assert result == "a" * debug.SYSLOG_MESSAGE_LIMIT
    fake.assert_called_once()
    assert fake.call_args.args[1] == "a" * debug.SYSLOG_MESSAGE_LIMIT