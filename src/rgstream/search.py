"""Search service: runs one ripgrep invocation through a StreamParser"""

import logging
import re
from collections.abc import Callable
from time import time

from rgstream import prometheus as prom
from rgstream.engine import CollectingSink, MatchSink, ProtocolError, StreamParser
from rgstream.models import LineMatch, SearchOptions, SearchResponse
from rgstream.process import RipgrepNotFoundError, Spawner, SubprocessSpawner, build_rg_args, default_cwd, find_rg

logger = logging.getLogger(__name__)


class SearchRequestError(ValueError):
    """The caller asked for a search that cannot be run (no corpus, blank query)."""


def validate_request(query: str | None, paths: list[str] | None) -> None:
    if not paths:
        raise SearchRequestError('First select a corpus')
    if query is None or re.sub(r'\s', '', query) == '':
        raise SearchRequestError('You must specify a query')


class RipGrepSearch:
    """
    A single search invocation.

    Spawns ripgrep, feeds its stdout chunk by chunk into a fresh StreamParser
    and hands the ordered results to a MatchSink once the process exits. The
    instance is not reusable: run a new one for every query.
    """

    def __init__(
        self,
        query: str,
        paths: list[str],
        options: SearchOptions | None = None,
        spawner: Spawner | None = None,
        rg_path: str | None = None,
        cwd: str | None = None,
    ):
        validate_request(query, paths)
        self.query = query
        self.paths = list(paths)
        self.options = options or SearchOptions()
        self.spawner = spawner or SubprocessSpawner()
        self.rg_path = rg_path
        self.cwd = cwd or default_cwd()
        self.args = build_rg_args(self.query, self.paths, self.options)
        self.parser = StreamParser(self.options.context, per_span=self.options.per_span)
        self.cancelled = False
        self._process = None

    def run(self, sink: MatchSink, on_match: Callable[[LineMatch], None] | None = None) -> int:
        """
        Run the search to completion.

        Args:
            sink: Receives the full ordered match list, then stop()
            on_match: Optional callback invoked for each record as soon as it is parsed

        Returns:
            ripgrep exit code

        Raises:
            RipgrepNotFoundError: If no rg binary can be located
            ProtocolError: If ripgrep output is malformed (sink is still stopped)
        """
        if self._process is not None:
            raise RuntimeError('Search already started; create a new RipGrepSearch per query')

        rg_path = self.rg_path or find_rg()
        if rg_path is None:
            raise RipgrepNotFoundError('ripgrep executable not found')

        logger.info(f'[SEARCH] query={self.query!r} paths={self.paths}')
        start_time = time()
        process = self.spawner.spawn(rg_path, self.args, self.cwd)
        self._process = process

        completed = False
        try:
            for chunk in process.iter_chunks():
                self._emit(self.parser.feed(chunk), on_match)
            returncode = process.wait()
            self._emit(self.parser.finish(), on_match)
            completed = True
        except ProtocolError:
            logger.error('[SEARCH] ripgrep emitted a match line before any file header, aborting')
            prom.record_search('protocol_error', time() - start_time, 0)
            raise
        finally:
            if not completed:
                # ripgrep must not outlive a failed search, and the sink always gets stop()
                process.terminate()
                process.wait()
                sink.stop()

        elapsed = time() - start_time
        matches = self.parser.matches

        if self.cancelled:
            status = 'cancelled'
        elif returncode in (0, 1):
            # 1 means "no matches" for ripgrep
            status = 'success'
        else:
            status = 'error'
            stderr = getattr(process, 'stderr', '')
            logger.warning(f'[SEARCH] ripgrep exited with code {returncode}: {stderr.strip()}')

        logger.info(f'[SEARCH] Done: {len(matches)} match(es) in {elapsed:.3f}s (exit={returncode})')
        prom.record_search(status, elapsed, len(matches))

        sink.update_matches(matches)
        sink.stop()
        return returncode

    def cancel(self) -> None:
        """Stop the running ripgrep process. Results parsed so far are still delivered."""
        self.cancelled = True
        if self._process is not None:
            self._process.terminate()

    def _emit(self, records: list[LineMatch], on_match: Callable[[LineMatch], None] | None) -> None:
        if on_match is None:
            return
        for record in records:
            try:
                on_match(record)
            except Exception as e:
                logger.warning(f'[SEARCH] on_match callback failed: {e}')


def search(
    query: str,
    paths: list[str],
    options: SearchOptions | None = None,
    spawner: Spawner | None = None,
    rg_path: str | None = None,
    cwd: str | None = None,
) -> SearchResponse:
    """Run a search and collect its results into a SearchResponse."""
    engine = RipGrepSearch(query, paths, options, spawner=spawner, rg_path=rg_path, cwd=cwd)
    sink = CollectingSink()
    time_before = time()
    exit_code = engine.run(sink)
    return SearchResponse(
        query=query,
        paths=engine.paths,
        options=engine.options,
        time=time() - time_before,
        exit_code=exit_code,
        matches=sink.matches,
    )
