"""Unit tests for text to emoji translation."""
from emoji_words.dictionary import EmojiDictionary
from emoji_words.translator import build_word_index, clean_word, translate_text


class TestCleanWord:
    """Tests for clean_word."""

    def test_lowercases_and_strips_punctuation(self):
        assert clean_word('Dog!') == 'dog'
        assert clean_word('"Pizza,"') == 'pizza'

    def test_underscores_removed(self):
        assert clean_word('hot_dog') == 'hotdog'

    def test_only_punctuation(self):
        assert clean_word('...') == ''


class TestBuildWordIndex:
    """Tests for build_word_index."""

    def test_first_emoji_wins(self, sample_dictionary):
        index = build_word_index(sample_dictionary)
        assert index['pet'] == '🐶'
        assert index['kitten'] == '🐱'


class TestTranslateText:
    """Tests for translate_text."""

    def test_replaces_known_words(self, sample_dictionary):
        assert translate_text('my Dog and cat!', sample_dictionary) == 'my 🐶 and 🐱'

    def test_unknown_words_kept_as_typed(self, sample_dictionary):
        assert translate_text('Hello, World', sample_dictionary) == 'Hello, World'

    def test_empty_text(self, sample_dictionary):
        assert translate_text('', sample_dictionary) == ''

    def test_whitespace_collapsed(self, sample_dictionary):
        assert translate_text('  smile \n\t lol ', sample_dictionary) == '😀 😂'

    def test_punctuation_only_word_kept(self, sample_dictionary):
        assert translate_text('smile ...', sample_dictionary) == '😀 ...'

    def test_empty_dictionary(self):
        assert translate_text('smile', EmojiDictionary()) == 'smile'

    def test_prebuilt_index(self, sample_dictionary):
        assert translate_text('dog', sample_dictionary, index={'dog': '🌭'}) == '🌭'
