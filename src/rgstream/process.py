"""ripgrep process collaborator: command line construction and spawning"""

import logging
import subprocess
import sys
import threading
from collections.abc import Iterator
from typing import Protocol

import sh

from rgstream.config import CHUNK_SIZE, RG_PATH
from rgstream.models import SearchOptions

logger = logging.getLogger(__name__)


# Output layout the stream parser understands: one header per file (even for a
# single file argument), reset-wrapped line numbers, and matches highlighted as
# <reset><red>...<reset>
BASE_RG_ARGS = [
    '--hidden',
    '--heading',
    '--with-filename',
    '--line-number',
    '--color',
    'ansi',
    '--colors',
    'path:none',
    '--colors',
    'line:none',
    '--colors',
    'match:fg:red',
    '--colors',
    'match:style:nobold',
]


class RipgrepNotFoundError(FileNotFoundError):
    pass


def build_rg_args(query: str, paths: list[str], options: SearchOptions) -> list[str]:
    """
    Build the full ripgrep argument list for a search.

    Args:
        query: Search term, passed verbatim
        paths: Corpus root paths
        options: Search options

    Returns:
        Argument list (without the rg executable itself)
    """
    args = list(BASE_RG_ARGS)
    if not options.regex:
        args.append('--fixed-strings')
    if not options.usecase:
        args.append('--ignore-case')
    if options.word:
        args.append('--word-regexp')

    if query.startswith('-'):
        # Otherwise ripgrep would parse the query as a flag
        args.extend(['--regexp', query])
    else:
        args.append(query)

    args.extend(paths)
    return args


def default_cwd() -> str:
    return 'c:/' if sys.platform == 'win32' else '/'


def find_rg() -> str | None:
    """Locate the ripgrep binary. RGSTREAM_RG_PATH wins over PATH lookup."""
    if RG_PATH:
        return RG_PATH
    try:
        rg = sh.Command('rg')
        return str(rg._path)
    except sh.CommandNotFound:
        logger.warning(
            "ripgrep not found. Install it:\n"
            "  macOS: brew install ripgrep\n"
            "  Ubuntu/Debian: apt install ripgrep\n"
            "  Fedora: dnf install ripgrep"
        )
        return None


class SpawnedProcess(Protocol):
    def iter_chunks(self) -> Iterator[bytes]: ...

    def wait(self) -> int: ...

    def terminate(self) -> None: ...


class Spawner(Protocol):
    def spawn(self, command: str, args: list[str], cwd: str) -> SpawnedProcess: ...


class SubprocessProcess:
    """A running ripgrep child. Stdout is read in chunks, stderr drained on a side thread."""

    def __init__(self, proc: subprocess.Popen, chunk_size: int):
        self._proc = proc
        self._chunk_size = chunk_size
        self._stderr_lines: list[bytes] = []
        self._stderr_thread = threading.Thread(target=self._drain_stderr, name='rg-stderr', daemon=True)
        self._stderr_thread.start()

    def _drain_stderr(self) -> None:
        if self._proc.stderr is None:
            return
        for line in self._proc.stderr:
            self._stderr_lines.append(line)

    @property
    def pid(self) -> int:
        return self._proc.pid

    @property
    def stderr(self) -> str:
        return b''.join(self._stderr_lines).decode('utf-8', errors='replace')

    def iter_chunks(self) -> Iterator[bytes]:
        if self._proc.stdout is None:
            return
        while True:
            chunk = self._proc.stdout.read1(self._chunk_size)
            if not chunk:
                break
            yield chunk

    def wait(self) -> int:
        returncode = self._proc.wait()
        self._stderr_thread.join(timeout=5)
        if self._proc.stdout is not None:
            self._proc.stdout.close()
        if self._proc.stderr is not None and not self._stderr_thread.is_alive():
            self._proc.stderr.close()
        return returncode

    def terminate(self) -> None:
        if self._proc.poll() is None:
            logger.info(f'[PROCESS] Terminating ripgrep pid={self._proc.pid}')
            self._proc.terminate()


class SubprocessSpawner:
    def __init__(self, chunk_size: int = CHUNK_SIZE):
        self.chunk_size = chunk_size

    def spawn(self, command: str, args: list[str], cwd: str) -> SubprocessProcess:
        logger.debug(f'[PROCESS] Running: {command} {" ".join(args)} (cwd={cwd})')
        proc = subprocess.Popen(
            [command, *args],
            cwd=cwd,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
        )
        return SubprocessProcess(proc, self.chunk_size)
