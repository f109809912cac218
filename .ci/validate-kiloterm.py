#!/usr/bin/env python3
"""Validate kiloterm and kilo on a real terminal.

Exercises the kiloterm key table and control sequences, raw mode
acquisition/release on the controlling terminal, and the cursor position
report size query against the actual terminal emulator.

Run from the project root: python .ci/validate-kiloterm.py
"""

import os
import sys

# Ensure the project root (CWD) is on the import path, since Python
# adds the script's directory (.ci/) rather than CWD by default.
sys.path.insert(0, os.getcwd())


def check_kiloterm_units():
    """kiloterm constants and helpers -- no terminal required."""
    from kiloterm import Key, ctrl_key, cursor_position, _ESCAPE_SEQUENCES

    # Key constants exist and are distinct
    names = (
        "UP",
        "DOWN",
        "LEFT",
        "RIGHT",
        "HOME",
        "END",
        "PAGE_UP",
        "PAGE_DOWN",
        "DELETE",
    )
    values = [getattr(Key, name) for name in names]
    assert len(set(values)) == len(values), "Key constants distinct"

    # Every escape sequence starts with ESC and fits the 3-byte lookahead
    for seq, key in _ESCAPE_SEQUENCES.items():
        assert seq[:1] == b"\x1b", "ESC prefix for {!r}".format(seq)
        assert 3 <= len(seq) <= 4, "length of {!r}".format(seq)
        assert key in values, "known key for {!r}".format(seq)

    assert ctrl_key("q") == 0x11, "Ctrl-Q"
    assert cursor_position(0, 0) == "\x1b[1;1H", "1-based cursor position"

    print("kiloterm unit checks passed")


def check_raw_mode():
    """Raw mode on the controlling terminal is restored exactly."""
    import termios

    from kiloterm import RawMode

    if not (os.isatty(sys.stdin.fileno()) and os.isatty(sys.stdout.fileno())):
        print("Raw mode checks skipped (no TTY)")
        return

    fd = sys.stdin.fileno()
    before = termios.tcgetattr(fd)
    with RawMode(fd) as raw_mode:
        assert raw_mode.snapshot == before, "snapshot"
        assert not termios.tcgetattr(fd)[3] & termios.ECHO, "echo off"
    assert termios.tcgetattr(fd) == before, "mode restored"

    print("Raw mode checks passed")


def check_window_size():
    """The cursor position report agrees with the OS window size."""
    from kiloterm import RawMode, CURSOR_HOME, get_window_size, write

    if not (os.isatty(sys.stdin.fileno()) and os.isatty(sys.stdout.fileno())):
        print("Window size checks skipped (no TTY)")
        return

    in_fd = sys.stdin.fileno()
    out_fd = sys.stdout.fileno()
    with RawMode(in_fd):
        probed = get_window_size(in_fd, out_fd)
        queried = get_window_size(in_fd, out_fd, query_os=True)
        write(out_fd, CURSOR_HOME)

    assert probed.rows > 0 and probed.cols > 0, "probed size"
    assert probed == queried, "probed {} != OS {}".format(probed, queried)

    print("Window size checks passed ({}x{})".format(probed.cols, probed.rows))


if __name__ == "__main__":
    check_kiloterm_units()
    check_raw_mode()
    check_window_size()
    print("All checks passed")
