"""Unit tests for the offset state store."""
import json
import pytest
from datetime import datetime

from emoji_words.state import OffsetState, OffsetStore, parse_offset


@pytest.fixture
def store(tmp_path):
    return OffsetStore(tmp_path / 'emoji_generator_state.json')


class TestParseOffset:
    """Tests for parse_offset."""

    def test_valid_values(self):
        assert parse_offset('12') == 12
        assert parse_offset(' 0 ') == 0
        assert parse_offset(7) == 7

    def test_invalid_values(self):
        assert parse_offset(None) is None
        assert parse_offset('-1') is None
        assert parse_offset('abc') is None
        assert parse_offset('1.5') is None
        assert parse_offset(-3) is None
        assert parse_offset(True) is None


class TestOffsetStoreLoad:
    """Tests for OffsetStore.load."""

    def test_defaults_to_zero(self, store):
        assert store.load() == OffsetState(current_offset=0)

    def test_command_line_wins(self, store):
        store.save(8)
        assert store.load('3').current_offset == 3

    def test_invalid_command_line_uses_state(self, store):
        store.save(8)
        assert store.load('oops').current_offset == 8
        assert store.load('-2').current_offset == 8

    def test_reads_persisted_offset(self, store):
        saved = store.save(12)
        loaded = store.load()
        assert loaded.current_offset == 12
        assert loaded.last_updated == saved.last_updated

    def test_corrupt_file_defaults_to_zero(self, store):
        store.path.write_text('{not json', encoding='utf-8')
        assert store.load().current_offset == 0

    def test_non_object_defaults_to_zero(self, store):
        store.path.write_text('[4]', encoding='utf-8')
        assert store.load().current_offset == 0

    def test_negative_persisted_offset_defaults_to_zero(self, store):
        store.path.write_text('{"currentOffset": -5}', encoding='utf-8')
        assert store.load().current_offset == 0

    def test_missing_key_defaults_to_zero(self, store):
        store.path.write_text('{"lastUpdated": "2025-01-01T00:00:00+00:00"}', encoding='utf-8')
        assert store.load().current_offset == 0


class TestOffsetStoreSave:
    """Tests for OffsetStore.save."""

    def test_file_format(self, store):
        store.save(4)
        data = json.loads(store.path.read_text(encoding='utf-8'))
        assert data['currentOffset'] == 4
        assert datetime.fromisoformat(data['lastUpdated']).tzinfo is not None

    def test_overwrites(self, store):
        store.save(4)
        store.save(8)
        assert json.loads(store.path.read_text(encoding='utf-8'))['currentOffset'] == 8

    def test_creates_parent_directory(self, tmp_path):
        store = OffsetStore(tmp_path / 'state' / 'offset.json')
        store.save(1)
        assert store.load().current_offset == 1

    def test_negative_offset_rejected(self, store):
        with pytest.raises(ValueError):
            store.save(-1)
