# Copyright (c) 2026 kilo contributors
# SPDX-License-Identifier: ISC
#
# End-to-end test: kilo() on a pseudo-terminal, with a thread playing the
# part of the terminal emulator on the master side.

import os
import select
import termios
import threading
import time

import pytest

import kilo
from kiloterm import CLEAR_SCREEN, CURSOR_HOME, CURSOR_REPORT_REQUEST, CURSOR_TO_CORNER


def _fake_terminal(master, rows, cols, keys, output):
    # Answers the cursor position request with a rows x cols screen, then
    # "types" 'keys'. Collects everything the editor draws into 'output'
    # until it clears the screen on quit.

    answered = False
    deadline = time.monotonic() + 10
    while time.monotonic() < deadline:
        ready, _, _ = select.select([master], [], [], 0.1)
        if not ready:
            continue
        try:
            data = os.read(master, 4096)
        except OSError:
            break
        if not data:
            break
        output += data

        if not answered and CURSOR_REPORT_REQUEST.encode() in output:
            os.write(master, f"\x1b[{rows};{cols}R".encode() + keys)
            answered = True

        if CLEAR_SCREEN.encode() in output:
            break


def test_session(pty):
    master, slave = pty
    before = termios.tcgetattr(slave)

    output = bytearray()
    term = threading.Thread(
        target=_fake_terminal,
        args=(master, 24, 80, b"\x1b[B\x1b[C\x1b[C\x11", output),
        daemon=True,
    )
    term.start()

    # Returns normally (exit status 0) on Ctrl-Q
    assert kilo.kilo(slave, slave) is None
    term.join(10)

    out = bytes(output).decode()
    assert out.startswith(CURSOR_TO_CORNER + CURSOR_REPORT_REQUEST)
    # 24 rows per frame, banner on row 8, cursor moved down once and right
    # twice before quitting
    assert "~" + 25 * " " + "Kilo editor -- version 0.0.1" in out
    assert out.count("\r\n") == 4 * 23
    assert "\x1b[2;3H" in out
    assert out.endswith(CLEAR_SCREEN + CURSOR_HOME)

    assert termios.tcgetattr(slave) == before


def test_no_cursor_report(pty):
    """A terminal that never answers the size query is a fatal error, and
    the terminal is still restored."""
    master, slave = pty
    before = termios.tcgetattr(slave)

    with pytest.raises(SystemExit) as excinfo:
        kilo.kilo(slave, slave)
    assert excinfo.value.code == "kilo: get_cursor_position: incomplete reply b''"

    assert termios.tcgetattr(slave) == before
    os.set_blocking(master, False)
    assert CURSOR_REPORT_REQUEST.encode() in os.read(master, 1024)


class _Stream:
    # Stands in for sys.stdin/sys.stdout, backed by 'fd'

    def __init__(self, fd):
        self._fd = fd

    def fileno(self):
        return self._fd


def test_main_exit_status(pty, monkeypatch):
    """_main() (the 'kilo' command) returns normally on Ctrl-Q, i.e. the
    process exits with status 0."""
    master, slave = pty
    monkeypatch.setattr(kilo.sys, "stdin", _Stream(slave))
    monkeypatch.setattr(kilo.sys, "stdout", _Stream(slave))

    output = bytearray()
    term = threading.Thread(
        target=_fake_terminal, args=(master, 10, 40, b"\x11", output), daemon=True
    )
    term.start()

    assert kilo._main() is None
    term.join(10)

    assert bytes(output).endswith((CLEAR_SCREEN + CURSOR_HOME).encode())
