#!/usr/bin/env python3

# Copyright (c) 2026 kilo contributors
# SPDX-License-Identifier: ISC

"""
kiloterm -- raw terminal I/O for the kilo editor

Byte-level control of a VT100-compatible terminal: raw mode acquisition and
restoration, window size discovery through the cursor position report,
keyboard input decoding (including escape sequences for the navigation
keys), and frame output through a single write.

Zero external dependencies. Uses only Python stdlib: os, errno, termios, re
and collections. POSIX only.

All reads go through the file descriptor given to each object, so any
descriptor in raw mode (or a non-blocking pipe) works as input.
"""

import collections
import errno
import os
import re
import termios

# ---------------------------------------------------------------------------
# Protocol limits
# ---------------------------------------------------------------------------

# Read timeout installed by RawMode, in tenths of a second (VTIME)
_READ_TIMEOUT = 1

# Maximum number of bytes following ESC in a key escape sequence
_ESCAPE_SEQ_LEN = 3

# Maximum length of a cursor position report reply
_CURSOR_REPORT_LEN = 32

_ESC = 0x1B


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class TerminalError(Exception):
    """Fatal terminal-control failure.

    'operation' names the call or step that failed (e.g. "tcsetattr",
    "get_cursor_position"), 'reason' is a human-readable description.
    """

    def __init__(self, operation, reason):
        super().__init__(operation, reason)
        self.operation = operation
        self.reason = reason

    def __str__(self):
        return f"{self.operation}: {self.reason}"


def _os_error_reason(e):
    return e.strerror or str(e)


# ---------------------------------------------------------------------------
# Output control sequences
# ---------------------------------------------------------------------------

CLEAR_SCREEN = "\x1b[2J"
CURSOR_HOME = "\x1b[H"
ERASE_LINE = "\x1b[K"  # erase to end of line
HIDE_CURSOR = "\x1b[?25l"
SHOW_CURSOR = "\x1b[?25h"
# Move forward and down far enough that the terminal clamps the cursor to its
# bottom-right corner
CURSOR_TO_CORNER = "\x1b[999C\x1b[999B"
# Device status report: ask for the cursor position
CURSOR_REPORT_REQUEST = "\x1b[6n"


def cursor_position(row, col):
    """Return the sequence that moves the cursor to the 0-based (row, col)."""
    return f"\x1b[{row + 1};{col + 1}H"


def write(fd, s):
    """Write 's' to 'fd' in a single write() call.

    Returns the number of bytes written, which can be short. Output errors
    are ignored and reported as 0 bytes written.
    """
    try:
        return os.write(fd, s.encode("utf-8"))
    except OSError:
        return 0


# ---------------------------------------------------------------------------
# Input constants
# ---------------------------------------------------------------------------


class Key:
    """Named constants for special keys."""

    UP = "key_up"
    DOWN = "key_down"
    LEFT = "key_left"
    RIGHT = "key_right"
    PAGE_UP = "key_page_up"
    PAGE_DOWN = "key_page_down"
    HOME = "key_home"
    END = "key_end"
    DELETE = "key_delete"


def ctrl_key(k):
    """Return the byte sent for Ctrl+'k' ('k' is a character or byte value).

    Clears the upper three bits, e.g. ctrl_key("q") == 0x11.
    """
    if isinstance(k, str):
        k = ord(k)
    return k & 0x1F


# Map escape sequences to Key constants. Multiple entries per key to
# handle terminal variants (xterm, rxvt, linux console, application mode).
_ESCAPE_SEQUENCES = {
    # Arrow keys
    b"\x1b[A": Key.UP,
    b"\x1b[B": Key.DOWN,
    b"\x1b[C": Key.RIGHT,
    b"\x1b[D": Key.LEFT,
    # Page Up / Page Down
    b"\x1b[5~": Key.PAGE_UP,
    b"\x1b[6~": Key.PAGE_DOWN,
    # Home
    b"\x1b[H": Key.HOME,  # xterm
    b"\x1bOH": Key.HOME,  # application mode
    b"\x1b[1~": Key.HOME,  # linux console
    b"\x1b[7~": Key.HOME,  # rxvt
    # End
    b"\x1b[F": Key.END,  # xterm
    b"\x1bOF": Key.END,  # application mode
    b"\x1b[4~": Key.END,  # linux console
    b"\x1b[8~": Key.END,  # rxvt
    # Delete
    b"\x1b[3~": Key.DELETE,
}


# ---------------------------------------------------------------------------
# Low-level reads
# ---------------------------------------------------------------------------


def _read_byte(fd):
    """Read a single byte from 'fd'.

    Returns the byte as an int, or None if nothing arrived before the read
    timeout (or, on a non-blocking descriptor, if nothing is available).
    Any other read failure raises TerminalError.
    """
    try:
        data = os.read(fd, 1)
    except OSError as e:
        if e.errno in (errno.EAGAIN, errno.EWOULDBLOCK):
            return None
        raise TerminalError("read", _os_error_reason(e))

    return data[0] if data else None


def _read_bytes(fd, n):
    # Reads exactly 'n' bytes, giving each byte a single timeout. Returns
    # None if any of them fails to arrive.
    res = bytearray()
    for _ in range(n):
        c = _read_byte(fd)
        if c is None:
            return None
        res.append(c)
    return bytes(res)


# ---------------------------------------------------------------------------
# Raw mode
# ---------------------------------------------------------------------------


class RawMode:
    """Exclusive raw-mode discipline for the terminal on 'fd'.

    Use as a context manager:

        with RawMode(fd) as raw_mode:
            ...

    The original settings are restored when the block exits, however it
    exits.
    """

    def __init__(self, fd):
        self.fd = fd
        self.snapshot = None

    @staticmethod
    def _make_raw(mode):
        """Return a raw-mode copy of the termios attribute list 'mode'."""
        new = list(mode)
        new[6] = list(mode[6])
        # IFLAG: no break-to-SIGINT, CR-to-NL, parity check, stripping or
        # software flow control
        new[0] &= ~(
            termios.BRKINT | termios.ICRNL | termios.INPCK | termios.ISTRIP | termios.IXON
        )
        # OFLAG: no output post-processing ("\n" is not turned into "\r\n")
        new[1] &= ~termios.OPOST
        # CFLAG: 8-bit characters
        new[2] |= termios.CS8
        # LFLAG: no echo, canonical mode, Ctrl-V or signal keys
        new[3] &= ~(termios.ECHO | termios.ICANON | termios.IEXTEN | termios.ISIG)
        # Return from read() as soon as there's any input, or after the
        # timeout with nothing
        new[6][termios.VMIN] = 0
        new[6][termios.VTIME] = _READ_TIMEOUT
        return new

    def acquire(self):
        """Save the current terminal settings and switch to raw mode."""
        if self.snapshot is not None:
            raise TerminalError("acquire", "raw mode already held")

        try:
            snapshot = termios.tcgetattr(self.fd)
        except termios.error as e:
            raise TerminalError("tcgetattr", e.args[-1])

        try:
            termios.tcsetattr(self.fd, termios.TCSAFLUSH, self._make_raw(snapshot))
        except termios.error as e:
            raise TerminalError("tcsetattr", e.args[-1])

        self.snapshot = snapshot

    def release(self):
        """Restore the settings saved by acquire(). Does nothing if raw mode
        isn't held."""
        if self.snapshot is None:
            return

        snapshot = self.snapshot
        self.snapshot = None
        try:
            termios.tcsetattr(self.fd, termios.TCSAFLUSH, snapshot)
        except termios.error as e:
            raise TerminalError("tcsetattr", e.args[-1])

    def __enter__(self):
        self.acquire()
        return self

    def __exit__(self, exc_type, exc_value, tb):
        self.release()


# ---------------------------------------------------------------------------
# Window size
# ---------------------------------------------------------------------------

ViewportSize = collections.namedtuple("ViewportSize", "rows cols")

# Cursor position report, with the terminating 'R' already stripped
_CURSOR_REPORT_RE = re.compile(rb"\x1b\[(\d+);(\d+)")


def get_cursor_position(in_fd, out_fd):
    """Ask the terminal for the cursor position and return it as a
    ViewportSize (1-based row and column, i.e. the size of the area up to
    and including the cursor).

    Raises TerminalError if the request can't be written or the reply is
    incomplete or malformed.
    """
    if write(out_fd, CURSOR_REPORT_REQUEST) != len(CURSOR_REPORT_REQUEST):
        raise TerminalError("get_cursor_position", "short write of request")

    # Reply: ESC [ <rows> ; <cols> R
    reply = bytearray()
    while True:
        c = _read_byte(in_fd)
        if c is None:
            raise TerminalError(
                "get_cursor_position", f"incomplete reply {bytes(reply)!r}"
            )
        if c == ord("R"):
            break
        reply.append(c)
        if len(reply) >= _CURSOR_REPORT_LEN:
            raise TerminalError("get_cursor_position", "reply too long")

    match = _CURSOR_REPORT_RE.fullmatch(reply)
    if not match:
        raise TerminalError("get_cursor_position", f"malformed reply {bytes(reply)!r}")

    rows, cols = int(match.group(1)), int(match.group(2))
    if not rows or not cols:
        raise TerminalError(
            "get_cursor_position", f"reported a {rows}x{cols} terminal"
        )

    return ViewportSize(rows, cols)


def get_window_size(in_fd, out_fd, query_os=False):
    """Return the terminal size as a ViewportSize.

    If 'query_os' is True, the size reported by the OS (TIOCGWINSZ) is used
    when it has nonzero dimensions. Otherwise, and when that fails, the
    cursor is pushed to the bottom-right corner and its position is read
    back from the terminal.
    """
    if query_os:
        try:
            sz = os.get_terminal_size(out_fd)
        except OSError:
            pass
        else:
            if sz.columns and sz.lines:
                return ViewportSize(sz.lines, sz.columns)

    if write(out_fd, CURSOR_TO_CORNER) != len(CURSOR_TO_CORNER):
        raise TerminalError("get_window_size", "short write of cursor move")

    return get_cursor_position(in_fd, out_fd)


# ---------------------------------------------------------------------------
# Input
# ---------------------------------------------------------------------------


class InputDecoder:
    """Turns the bytes read from 'fd' into key events.

    Events are either ints (raw bytes, including a lone ESC) or Key
    constants.
    """

    def __init__(self, fd):
        self.fd = fd

    def read_key(self):
        """Block until a key arrives and return it.

        A lone Esc keypress is returned as 0x1b once the rest of an escape
        sequence fails to arrive within the read timeout.
        """
        while True:
            c = _read_byte(self.fd)
            if c is not None:
                break

        if c == _ESC:
            return self._read_escape()

        return c

    def _read_escape(self):
        # Called after ESC. Reads the rest of the sequence, giving up and
        # returning ESC if it doesn't arrive in time or isn't known.

        seq = _read_bytes(self.fd, _ESCAPE_SEQ_LEN - 1)
        if seq is None:
            return _ESC

        if seq[0] == ord("[") and seq[1] in b"0123456789":
            # ESC [ <digit> ~
            tail = _read_bytes(self.fd, 1)
            if tail is None:
                return _ESC
            seq += tail

        return _ESCAPE_SEQUENCES.get(b"\x1b" + seq, _ESC)


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------


class FrameBuffer:
    """Output for one frame, written to the terminal in one go.

    Batching everything into a single write() keeps the terminal from
    showing a half-drawn screen.
    """

    __slots__ = ("_chunks",)

    def __init__(self):
        self._chunks = []

    def append(self, s):
        self._chunks.append(s)

    def getvalue(self):
        return "".join(self._chunks)

    def flush(self, fd):
        """Write the frame to 'fd' and empty the buffer. Returns the number
        of bytes written."""
        s = self.getvalue()
        self._chunks = []
        return write(fd, s)
