"""Shared pytest fixtures for all tests."""

import logging
import os

import pytest
from cli.config import Config
from assembler.chunk_merger import ChunkMerger
from common.logging_config import DebugLog
from common.types import UploadedChunk


@pytest.fixture
def temp_config(tmp_path):
    """
    Create temporary config instance.

    Returns:
        Config instance with temp config file
    """
    return Config(tmp_path / '.chunkrelay' / 'config.json')


@pytest.fixture
def chunk_dir(tmp_path):
    return tmp_path / 'uploads' / 'chunks'


@pytest.fixture
def output_dir(tmp_path):
    return tmp_path / 'uploads'


@pytest.fixture
def debug_log(caplog):
    """DebugLog with debug mode enabled, captured by caplog."""
    caplog.set_level(logging.INFO, logger='tests.chunkrelay')
    return DebugLog(logging.getLogger('tests.chunkrelay'), debug_mode=True)


@pytest.fixture
def merger(output_dir, chunk_dir, debug_log):
    """ChunkMerger writing under tmp_path."""
    return ChunkMerger(output_dir=str(output_dir), chunk_dir=str(chunk_dir), log=debug_log)


@pytest.fixture
def payload():
    """Random payload of 10_000 bytes."""
    return os.urandom(10_000)


@pytest.fixture
def sample_file(tmp_path, payload):
    """
    Create a sample binary file for split tests.

    Returns:
        Path to the sample file
    """
    file_path = tmp_path / 'sample.dat'
    file_path.write_bytes(payload)
    return file_path


@pytest.fixture
def make_chunks():
    """Slice data into UploadedChunk objects the way a transport would deliver them."""
    def _make(name: str, data: bytes, chunk_size: int) -> list[UploadedChunk]:
        return [
            UploadedChunk(original_name=name, data=data[start:start + chunk_size])
            for start in range(0, len(data), chunk_size)
        ]
    return _make
