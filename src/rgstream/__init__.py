"""rgstream - streaming parser for colorized ripgrep output"""

from rgstream.__version__ import __version__
from rgstream.engine import CollectingSink, MatchAccumulator, MatchSink, ProtocolError, StreamParser
from rgstream.models import LineMatch, SearchOptions, SearchResponse
from rgstream.search import RipGrepSearch, SearchRequestError, search

__all__ = [
    '__version__',
    'CollectingSink',
    'LineMatch',
    'MatchAccumulator',
    'MatchSink',
    'ProtocolError',
    'RipGrepSearch',
    'SearchOptions',
    'SearchRequestError',
    'SearchResponse',
    'StreamParser',
    'search',
]
