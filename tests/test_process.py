"""Tests for ripgrep command construction and process spawning"""

import sys
from unittest.mock import patch

import sh

from rgstream.models import SearchOptions
from rgstream.process import BASE_RG_ARGS, SubprocessSpawner, build_rg_args, default_cwd, find_rg


class TestBuildRgArgs:
    def test_defaults(self):
        args = build_rg_args('error', ['/var/log'], SearchOptions())
        assert args[: len(BASE_RG_ARGS)] == BASE_RG_ARGS
        assert '--fixed-strings' in args
        assert '--ignore-case' in args
        assert '--word-regexp' not in args
        assert args[-2:] == ['error', '/var/log']

    def test_fixed_color_flags(self):
        args = build_rg_args('x', ['/'], SearchOptions())
        for flag in ('--hidden', '--heading', '--with-filename', '--line-number'):
            assert flag in args
        assert args[args.index('--color') + 1] == 'ansi'
        assert 'match:fg:red' in args
        assert 'match:style:nobold' in args

    def test_regex_case_sensitive_word(self):
        args = build_rg_args('err.*', ['/a'], SearchOptions(regex=True, usecase=True, word=True))
        assert '--fixed-strings' not in args
        assert '--ignore-case' not in args
        assert '--word-regexp' in args

    def test_multiple_paths(self):
        args = build_rg_args('q', ['/a', '/b', '/c'], SearchOptions())
        assert args[-4:] == ['q', '/a', '/b', '/c']

    def test_leading_dash_query_is_escaped(self):
        args = build_rg_args('-foo', ['/a'], SearchOptions())
        assert args[-3:] == ['--regexp', '-foo', '/a']

    def test_query_passed_verbatim(self):
        args = build_rg_args('(unclosed [regex', ['/a'], SearchOptions(regex=True))
        assert '(unclosed [regex' in args


class TestDefaultCwd:
    def test_posix(self):
        with patch.object(sys, 'platform', 'linux'):
            assert default_cwd() == '/'

    def test_windows(self):
        with patch.object(sys, 'platform', 'win32'):
            assert default_cwd() == 'c:/'


class TestFindRg:
    def test_env_override(self):
        with patch('rgstream.process.RG_PATH', '/opt/bin/rg'):
            assert find_rg() == '/opt/bin/rg'

    def test_not_found(self):
        with (
            patch('rgstream.process.RG_PATH', None),
            patch('rgstream.process.sh.Command', side_effect=sh.CommandNotFound('rg')),
        ):
            assert find_rg() is None


class TestSubprocessSpawner:
    def test_streams_stdout_chunks(self):
        spawner = SubprocessSpawner(chunk_size=4)
        process = spawner.spawn(sys.executable, ['-c', 'import sys; sys.stdout.write("line one\\nline two")'], cwd='/')
        data = b''.join(process.iter_chunks())
        assert process.wait() == 0
        assert data == b'line one\nline two'

    def test_exit_code_and_stderr(self):
        spawner = SubprocessSpawner()
        process = spawner.spawn(sys.executable, ['-c', 'import sys; sys.stderr.write("boom"); sys.exit(2)'], cwd='/')
        assert list(process.iter_chunks()) == []
        assert process.wait() == 2
        assert 'boom' in process.stderr

    def test_wait_closes_pipes(self):
        spawner = SubprocessSpawner()
        process = spawner.spawn(sys.executable, ['-c', 'print("x")'], cwd='/')
        list(process.iter_chunks())
        process.wait()
        assert process._proc.stdout.closed
        assert process._proc.stderr.closed
