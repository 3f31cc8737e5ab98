"""Tests for CLI command parsing."""

import pytest

from cli.models import HelpCommand, MergeCommand, SplitCommand, UploadCommand
from cli.parser import ParseError, parse_command
from cli.utils import format_file_size, parse_size


class TestParseCommand:
    """Test argument parsing into command objects."""

    def test_split(self):
        cmd = parse_command(['split', 'movie.mkv', 'chunks'])
        assert cmd == SplitCommand(file_path='movie.mkv', chunk_dir='chunks')

    def test_split_with_chunk_size(self):
        cmd = parse_command(['split', 'movie.mkv', 'chunks', '--chunk-size', '1MiB'])
        assert cmd.chunk_size == 1024 * 1024

    def test_split_with_inline_chunk_size(self):
        cmd = parse_command('split "my movie.mkv" chunks --chunk-size=512')
        assert cmd == SplitCommand(file_path='my movie.mkv', chunk_dir='chunks', chunk_size=512)

    def test_merge(self):
        cmd = parse_command(['merge', 'movie.mkv', '3', 'chunks', 'out'])
        assert cmd == MergeCommand(file_name='movie.mkv', total_chunks=3, chunk_dir='chunks', output_dir='out')

    def test_upload(self):
        cmd = parse_command(['upload', 'movie.mkv', '--chunk-size', '10MB'])
        assert cmd == UploadCommand(file_path='movie.mkv', chunk_size=10_000_000)

    def test_help(self):
        assert isinstance(parse_command(['help']), HelpCommand)

    @pytest.mark.parametrize('args,message', [
        ([], 'Empty command'),
        (['explode'], 'Unknown command'),
        (['split', 'only-one'], 'split requires'),
        (['split', 'a', 'b', '--chunk-size'], 'requires a value'),
        (['split', 'a', 'b', '--chunk-size', '0'], 'greater than zero'),
        (['split', 'a', 'b', '--chunk-size', '5XB'], 'Unknown size unit'),
        (['split', 'a', 'b', '--verbose'], 'Unknown option'),
        (['merge', 'a', 'three', 'c', 'd'], 'must be an integer'),
        (['merge', 'a', '0', 'c', 'd'], 'greater than zero'),
        (['upload'], 'exactly one file'),
    ])
    def test_errors(self, args, message):
        with pytest.raises(ParseError, match=message):
            parse_command(args)


class TestSizeHelpers:
    """Test size parsing and formatting."""

    def test_parse_size(self):
        assert parse_size('1024') == 1024
        assert parse_size('5MiB') == 5 * 1024 * 1024
        assert parse_size('2k') == 2048
        assert parse_size('3 GB') == 3_000_000_000

    def test_parse_size_invalid(self):
        with pytest.raises(ValueError):
            parse_size('lots')

    def test_format_file_size(self):
        assert format_file_size(512) == '512 B'
        assert format_file_size(1536) == '1.50 KiB'
        assert format_file_size(5 * 1024 * 1024) == '5.00 MiB'
