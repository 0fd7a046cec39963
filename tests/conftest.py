"""Shared fixtures: canned ripgrep output and a fake process spawner"""

import pytest

RESET = '\x1b[m'
START = '\x1b[m\x1b[31m'

# ripgrep < 14 writes ESC[m, current releases ESC[0m
RESET_SPELLINGS = ['\x1b[m', '\x1b[0m']


class Wire:
    """Builds ripgrep --heading output lines with a given reset spelling."""

    def __init__(self, reset: str = RESET):
        self.reset = reset
        self.start = reset + '\x1b[31m'

    def header(self, path: str) -> str:
        return f'{self.reset}{path}{self.reset}'

    def match_line(self, line_number: int, payload: str) -> str:
        return f'{self.reset}{line_number}{self.reset}:{payload}'

    def hl(self, text: str) -> str:
        """Wrap text the way ripgrep highlights a match."""
        return f'{self.start}{text}{self.reset}'


_default_wire = Wire()
header = _default_wire.header
match_line = _default_wire.match_line
hl = _default_wire.hl


class FakeProcess:
    """Replays canned stdout chunks instead of running ripgrep."""

    def __init__(self, chunks, returncode=0, stderr='', error=None):
        self.chunks = list(chunks)
        self.returncode = returncode
        self.stderr = stderr
        self.error = error
        self.terminated = False
        self.waited = False

    def iter_chunks(self):
        for chunk in self.chunks:
            if self.terminated:
                break
            yield chunk
        if self.error is not None:
            raise self.error

    def wait(self):
        self.waited = True
        return -15 if self.terminated else self.returncode

    def terminate(self):
        self.terminated = True


class FakeSpawner:
    def __init__(self, chunks, returncode=0, stderr='', error=None):
        self.process = FakeProcess(chunks, returncode, stderr, error)
        self.calls = []

    def spawn(self, command, args, cwd):
        self.calls.append((command, args, cwd))
        return self.process


@pytest.fixture
def fake_spawner():
    """Factory fixture: fake_spawner(chunks, returncode=0) -> FakeSpawner"""
    return FakeSpawner


@pytest.fixture(params=RESET_SPELLINGS, ids=['reset-short', 'reset-zero'])
def wire(request) -> Wire:
    return Wire(request.param)


@pytest.fixture
def sample_output(wire) -> str:
    """Two files, one match each, with a blank separator and a CRLF line ending."""
    return (
        wire.header('/x/y.txt')
        + '\n'
        + wire.match_line(3, f'foo {wire.hl("bar")}baz')
        + '\n'
        + '\n'
        + wire.header('/x/é.txt')
        + '\n'
        + wire.match_line(10, f'héllo {wire.hl("wörld")}!')
        + '\r\n'
    )
