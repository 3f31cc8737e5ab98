"""Unit tests for on-disk chunk artifact storage."""

import os
import time

import pytest

from assembler.chunk_storage import ChunkStore


class TestChunkStore:
    """Test artifact naming and lifecycle."""

    def test_artifact_naming(self, tmp_path):
        store = ChunkStore(tmp_path)
        assert store.get_artifact_path('report', 3) == tmp_path / 'report.part_3'

    def test_write_creates_directory(self, tmp_path):
        store = ChunkStore(tmp_path / 'a' / 'b')
        path = store.write_artifact('report', 0, b'data')

        assert path.read_bytes() == b'data'
        assert store.artifact_exists('report', 0)

    def test_streaming_read(self, tmp_path):
        store = ChunkStore(tmp_path)
        store.write_artifact('report', 0, b'abcdefghij')

        pieces = list(store.read_artifact_streaming('report', 0, piece_size=4))

        assert pieces == [b'abcd', b'efgh', b'ij']

    def test_delete_twice_raises(self, tmp_path):
        store = ChunkStore(tmp_path)
        store.write_artifact('report', 0, b'x')
        store.delete_artifact('report', 0)

        assert not store.artifact_exists('report', 0)
        with pytest.raises(FileNotFoundError):
            store.delete_artifact('report', 0)

    def test_list_indexes_filters_by_base_name(self, tmp_path):
        store = ChunkStore(tmp_path)
        for i in (2, 0, 10):
            store.write_artifact('report', i, b'x')
        store.write_artifact('report-final', 1, b'x')
        (tmp_path / 'report.part_tmp').write_bytes(b'x')

        assert store.list_indexes('report') == [0, 2, 10]
        assert store.list_indexes('report-final') == [1]

    def test_list_indexes_missing_directory(self, tmp_path):
        assert ChunkStore(tmp_path / 'nope').list_indexes('report') == []

    def test_list_stale_artifacts(self, tmp_path):
        store = ChunkStore(tmp_path)
        old = store.write_artifact('old', 0, b'x')
        ChunkStore(tmp_path / 'session').write_artifact('older', 0, b'x')
        store.write_artifact('fresh', 0, b'x')

        an_hour_ago = time.time() - 3600
        os.utime(old, (an_hour_ago, an_hour_ago))
        os.utime(tmp_path / 'session' / 'older.part_0', (an_hour_ago, an_hour_ago))

        stale = sorted(p.name for p in store.list_stale_artifacts(60))

        assert stale == ['old.part_0', 'older.part_0']
