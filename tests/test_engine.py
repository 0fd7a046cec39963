"""Tests for the streaming parser and match accumulation"""

import pytest
from conftest import header, hl, match_line

from rgstream.engine import CollectingSink, MatchAccumulator, ProtocolError, StreamParser
from rgstream.models import LineMatch


def parse_all(chunks, context_width=40, per_span=False) -> list[LineMatch]:
    parser = StreamParser(context_width, per_span=per_span)
    for chunk in chunks:
        parser.feed(chunk)
    parser.finish()
    return parser.matches


class TestStreamParser:
    def test_end_to_end_scenario(self, wire):
        text = wire.header('/x/y.txt') + '\n' + wire.match_line(3, f'foo {wire.hl("bar")}baz') + '\n'
        [match] = parse_all([text.encode('utf-8')], context_width=2)
        assert match.origin == '/x/y.txt'
        assert match.filename == 'y.txt'
        assert match.line_number == 2
        assert match.left_context == 'o '
        assert match.match_text == 'bar'
        assert match.right_context == 'ba'

    def test_two_files_in_order(self, sample_output):
        matches = parse_all([sample_output.encode('utf-8')], context_width=3)
        assert [(m.origin, m.line_number, m.match_text) for m in matches] == [
            ('/x/y.txt', 2, 'bar'),
            ('/x/é.txt', 9, 'wörld'),
        ]
        assert matches[1].left_context == 'lo '
        assert matches[1].right_context == '!'

    def test_chunk_boundary_invariance(self, sample_output):
        """Every two-way split of the byte stream gives the same result as a single chunk"""
        data = sample_output.encode('utf-8')
        expected = parse_all([data], context_width=3)
        for split in range(len(data) + 1):
            assert parse_all([data[:split], data[split:]], context_width=3) == expected, f'split at {split}'

    def test_byte_at_a_time(self, sample_output):
        data = sample_output.encode('utf-8')
        chunks = [data[i : i + 1] for i in range(len(data))]
        assert parse_all(chunks) == parse_all([data])

    def test_text_chunks(self, sample_output):
        """Already-decoded transports are accepted"""
        assert parse_all([sample_output[:17], sample_output[17:]]) == parse_all([sample_output.encode('utf-8')])

    def test_feed_returns_records_completed_by_chunk(self):
        parser = StreamParser(10)
        assert parser.feed(header('/a.txt') + '\n' + match_line(1, hl('x'))) == []
        [match] = parser.feed('\n')
        assert match.match_text == 'x'

    def test_finish_parses_unterminated_last_line(self):
        parser = StreamParser(10)
        parser.feed(header('/a.txt') + '\n' + match_line(1, f'a{hl("b")}c'))
        assert parser.matches == []
        [match] = parser.finish()
        assert match.match_text == 'b'
        assert parser.finished

    def test_finish_is_idempotent(self):
        parser = StreamParser(10)
        parser.feed(header('/a.txt') + '\n' + match_line(1, hl('x')) + '\n')
        parser.finish()
        assert parser.finish() == []
        assert parser.feed(match_line(2, hl('y')) + '\n') == []
        assert len(parser.matches) == 1

    def test_match_before_header_is_protocol_error(self):
        parser = StreamParser(10)
        with pytest.raises(ProtocolError):
            parser.feed(match_line(1, hl('x')) + '\n')
        assert parser.matches == []
        assert parser.state.failed
        assert parser.finished
        assert parser.reassembler.carry_over is None

    def test_protocol_error_on_finish(self):
        parser = StreamParser(10)
        parser.feed(match_line(1, hl('x')))
        with pytest.raises(ProtocolError):
            parser.finish()

    def test_header_overwrites_origin(self):
        text = (
            header('/a.txt')
            + '\n'
            + match_line(1, hl('x'))
            + '\n'
            + header('/b.txt')
            + '\n'
            + match_line(5, hl('y'))
            + '\n'
        )
        matches = parse_all([text])
        assert [m.origin for m in matches] == ['/a.txt', '/b.txt']

    def test_unrecognized_lines_ignored(self):
        text = header('/a.txt') + '\n--\ncontext line\n\n' + match_line(1, hl('x')) + '\n'
        assert len(parse_all([text])) == 1

    def test_match_line_without_highlight_is_dropped(self):
        text = header('/a.txt') + '\n' + match_line(1, 'no markers here') + '\n'
        assert parse_all([text]) == []

    def test_crlf_output(self):
        text = header('/a.txt') + '\r\n' + match_line(1, f'ab{hl("cd")}ef') + '\r\n'
        [match] = parse_all([text])
        assert (match.left_context, match.match_text, match.right_context) == ('ab', 'cd', 'ef')

    def test_per_span(self):
        text = header('/a.txt') + '\n' + match_line(1, f'{hl("x")} {hl("y")}') + '\n'
        assert [m.match_text for m in parse_all([text], per_span=True)] == ['x', 'y']
        assert [m.match_text for m in parse_all([text])] == ['y']

    def test_repeated_origin_is_not_deduplicated(self):
        text = (header('/a.txt') + '\n' + match_line(1, hl('x')) + '\n') * 2
        assert len(parse_all([text])) == 2

    def test_line_match_is_immutable(self):
        [match] = parse_all([header('/a.txt') + '\n' + match_line(1, hl('x')) + '\n'])
        with pytest.raises(Exception):
            match.match_text = 'changed'


class TestMatchAccumulator:
    def test_preserves_insertion_order(self):
        accumulator = MatchAccumulator()
        first = LineMatch.create('/b', 5, '', 'x', '')
        second = LineMatch.create('/a', 1, '', 'y', '')
        accumulator.append(first)
        accumulator.extend([second, first])
        assert list(accumulator) == [first, second, first]
        assert len(accumulator) == 3

    def test_matches_is_a_copy(self):
        accumulator = MatchAccumulator()
        accumulator.append(LineMatch.create('/a', 0, '', 'x', ''))
        accumulator.matches.clear()
        assert len(accumulator) == 1


class TestCollectingSink:
    def test_update_and_stop(self):
        sink = CollectingSink()
        match = LineMatch.create('/a/b.txt', 0, 'l', 'm', 'r')
        sink.update_matches([match])
        sink.stop()
        assert sink.matches == [match]
        assert sink.stopped


class TestLineMatch:
    def test_filename_derivation(self):
        assert LineMatch.create('/a/b/c.txt', 0, '', 'x', '').filename == 'c.txt'
        assert LineMatch.create('c.txt', 0, '', 'x', '').filename == 'c.txt'
