# Copyright (c) 2026 kilo contributors
# SPDX-License-Identifier: ISC
#
# Shared fixtures and helpers for the kilo pytest suite.

import os
import sys

import pytest

# Ensure kilo and kiloterm are importable from the project root
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


class Pipe:
    """Pipe whose read end is non-blocking, so that an empty pipe reads like
    a raw-mode terminal that timed out."""

    def __init__(self):
        self.r, self.w = os.pipe()
        os.set_blocking(self.r, False)

    def feed(self, data):
        os.write(self.w, data)

    def drain(self):
        """Return everything written to the pipe so far."""
        chunks = []
        while True:
            try:
                data = os.read(self.r, 4096)
            except BlockingIOError:
                break
            if not data:
                break
            chunks.append(data)
        return b"".join(chunks)

    def close(self):
        os.close(self.r)
        os.close(self.w)


@pytest.fixture
def pipe():
    p = Pipe()
    yield p
    p.close()


@pytest.fixture
def out_pipe():
    p = Pipe()
    yield p
    p.close()


@pytest.fixture
def pty():
    """(master, slave) file descriptors of a fresh pseudo-terminal."""
    master, slave = os.openpty()
    yield master, slave
    os.close(slave)
    os.close(master)
