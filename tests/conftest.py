"""Pytest configuration and shared fixtures."""
import sys
import os
import json
import pytest

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from emoji_words.dictionary import EmojiDictionary  # noqa: E402


CONFIG_ENV_VARS = [
    'EMOJI_WORDS_DATA_DIR',
    'EMOJI_UNIVERSE_PATH',
    'EMOJI_STATE_PATH',
    'EMOJI_OUTPUT_DIR',
    'EMOJI_DICTIONARY_PATH',
    'EMOJI_BACKUP_PATH',
    'EMOJI_GENERATOR_COMMAND',
    'EMOJI_BATCH_SIZE',
    'EMOJI_MIN_WORDS',
    'EMOJI_MAX_WORDS',
    'EMOJI_GENERATION_TIMEOUT',
    'EMOJI_KILL_GRACE',
    'LOG_LEVEL',
    'STRUCTURED_LOGGING',
]


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep a developer's .env or shell settings out of the tests."""
    for name in CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


# ============================================================================
# Common test fixtures
# ============================================================================

@pytest.fixture
def ten_emoji():
    """Universe of ten emoji."""
    return ['😀', '😁', '😂', '🐶', '🐱', '🍕', '🍔', '🚗', '🎲', '⚽']


@pytest.fixture
def sample_dictionary_data():
    """Persisted dictionary with two categories."""
    return {
        'version': '2.0.0',
        'categories': {
            'Smileys & Emotion': {
                '😀': ['smile'],
                '😂': ['laugh', 'funny', 'lol'],
            },
            'Animals & Nature': {
                '🐶': ['dog', 'puppy', 'pet'],
                '🐱': ['cat', 'kitten', 'pet'],
            },
        },
    }


@pytest.fixture
def sample_dictionary(sample_dictionary_data):
    """Loaded sample dictionary."""
    return EmojiDictionary.from_dict(sample_dictionary_data)


@pytest.fixture
def dictionary_file(tmp_path, sample_dictionary_data):
    """Sample dictionary written to disk."""
    path = tmp_path / 'emojiDictionary.json'
    path.write_text(json.dumps(sample_dictionary_data, ensure_ascii=False), encoding='utf-8')
    return path
