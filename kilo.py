#!/usr/bin/env python3

# Copyright (c) 2026 kilo contributors
# SPDX-License-Identifier: ISC

"""
Overview
========

kilo is a small full-screen text editor for VT100-compatible terminals,
built on kiloterm (raw terminal I/O in pure Python).

This is the core of the editor: it puts the terminal in raw mode, finds out
how big it is, draws the screen and moves the cursor around in response to
the keyboard. There is no text buffer yet, so every row is drawn as an empty
'~' line, with a welcome banner a third of the way down.

Keys:

  Arrow keys         : Move the cursor
  Home/End           : Jump to the first/last column
  Page Up/Page Down  : Jump to the top/bottom row
  Ctrl-Q             : Quit


Running
=======

kilo.py can be run either as a standalone executable ('kilo' when installed)
or by calling kilo() with the file descriptors to use. It always talks to a
terminal and takes no arguments.

The exit status is 0 when the user quits. If the terminal can't be put in
raw mode or its size can't be determined, an error naming the failed
operation is printed to stderr and the exit status is 1. The terminal
settings are restored in both cases.
"""

import sys

from kiloterm import (
    CLEAR_SCREEN,
    CURSOR_HOME,
    ERASE_LINE,
    HIDE_CURSOR,
    SHOW_CURSOR,
    FrameBuffer,
    InputDecoder,
    Key,
    RawMode,
    TerminalError,
    ctrl_key,
    cursor_position,
    get_window_size,
    write,
)

#
# Configuration variables
#

KILO_VERSION = "0.0.1"

# If True, ask the OS for the window size (TIOCGWINSZ) before falling back on
# moving the cursor to the bottom-right corner and asking the terminal where
# it ended up. The terminal query works everywhere, so it is used by default.
_QUERY_WINDOW_SIZE = False

# Character drawn at the start of rows past the end of the text
_ROW_MARKER = "~"

_QUIT_KEY = ctrl_key("q")


#
# Editor state
#


class Cursor:
    """Cursor position within the viewport (0-based column and row)."""

    __slots__ = ("cx", "cy")

    def __init__(self, cx=0, cy=0):
        self.cx = cx
        self.cy = cy

    def __eq__(self, other):
        if not isinstance(other, Cursor):
            return NotImplemented
        return self.cx == other.cx and self.cy == other.cy

    def __repr__(self):
        return f"Cursor({self.cx}, {self.cy})"


class Editor:
    """
    Editor state, passed explicitly through the main loop.

    size:
      kiloterm.ViewportSize of the terminal

    cursor:
      Cursor, always within 'size'

    raw_mode:
      kiloterm.RawMode holding the original terminal settings, or None if
      the caller manages the terminal mode itself

    welcome:
      Banner drawn a third of the way down the screen
    """

    def __init__(self, size, in_fd, out_fd, raw_mode=None):
        self.size = size
        self.cursor = Cursor()
        self.raw_mode = raw_mode
        self.welcome = f"Kilo editor -- version {KILO_VERSION}"
        self._keys = InputDecoder(in_fd)
        self._out_fd = out_fd

    def run(self):
        """Render, read a key and apply it, until the user quits."""
        while True:
            self.refresh_screen()
            if not self.process_key(self._keys.read_key()):
                return

    #
    # Input
    #

    def process_key(self, key):
        """Apply a key event. Returns False if the editor should quit."""
        if key == _QUIT_KEY:
            # Don't leave the editor's screen behind in the shell
            write(self._out_fd, CLEAR_SCREEN + CURSOR_HOME)
            return False

        self.move_cursor(key)
        return True

    def move_cursor(self, key):
        """Move the cursor in response to a navigation key, clamping at the
        edges of the screen. Other keys are ignored."""
        cursor = self.cursor
        rows, cols = self.size

        if key == Key.LEFT:
            if cursor.cx != 0:
                cursor.cx -= 1

        elif key == Key.RIGHT:
            if cursor.cx != cols - 1:
                cursor.cx += 1

        elif key == Key.UP:
            if cursor.cy != 0:
                cursor.cy -= 1

        elif key == Key.DOWN:
            if cursor.cy != rows - 1:
                cursor.cy += 1

        elif key == Key.HOME:
            cursor.cx = 0

        elif key == Key.END:
            cursor.cx = cols - 1

        elif key in (Key.PAGE_UP, Key.PAGE_DOWN):
            # A screenful of single steps, which stops at the edge
            step = Key.UP if key == Key.PAGE_UP else Key.DOWN
            for _ in range(rows):
                self.move_cursor(step)

    #
    # Output
    #

    def refresh_screen(self):
        """Redraw the whole screen with a single write."""
        buf = FrameBuffer()

        # Hide the cursor while drawing so it doesn't flicker around
        buf.append(HIDE_CURSOR)
        buf.append(CURSOR_HOME)

        self.draw_rows(buf)

        buf.append(cursor_position(self.cursor.cy, self.cursor.cx))
        buf.append(SHOW_CURSOR)

        buf.flush(self._out_fd)

    def draw_rows(self, buf):
        """Append all rows of the screen to the FrameBuffer 'buf'."""
        rows, cols = self.size

        for y in range(rows):
            if y == rows // 3:
                buf.append(_welcome_row(self.welcome, cols))
            else:
                buf.append(_ROW_MARKER)

            buf.append(ERASE_LINE)
            if y < rows - 1:
                buf.append("\r\n")


def _welcome_row(welcome, cols):
    # Returns 'welcome' truncated to 'cols' and centered, with the row marker
    # in the first column if there's room for it

    welcome = welcome[:cols]

    padding = (cols - len(welcome)) // 2
    if not padding:
        return welcome

    return _ROW_MARKER + (padding - 1) * " " + welcome


#
# Main application
#


def _main():
    kilo()


def kilo(in_fd=None, out_fd=None):
    """
    Runs the editor on the terminal, returning when the user quits.

    in_fd:
      File descriptor to read keys from. Defaults to stdin.

    out_fd:
      File descriptor to draw on. Defaults to stdout.

    Terminal errors are fatal: the terminal settings are restored and
    SystemExit is raised with a message naming the failed operation (exit
    status 1).
    """
    if in_fd is None:
        in_fd = sys.stdin.fileno()
    if out_fd is None:
        out_fd = sys.stdout.fileno()

    try:
        with RawMode(in_fd) as raw_mode:
            size = get_window_size(in_fd, out_fd, _QUERY_WINDOW_SIZE)
            Editor(size, in_fd, out_fd, raw_mode).run()
    except TerminalError as e:
        sys.exit(f"kilo: {e}")


if __name__ == "__main__":
    _main()
