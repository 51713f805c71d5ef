"""Text to emoji substitution using the emoji dictionary."""
import re
from typing import Dict, Optional

from emoji_words.dictionary import EmojiDictionary

_NON_WORD = re.compile(r'[^\w\s]|_')


def clean_word(word: str) -> str:
    """Lowercase a word and strip punctuation for matching."""
    return _NON_WORD.sub('', word.lower())


def build_word_index(dictionary: EmojiDictionary) -> Dict[str, str]:
    """Map each word to the first emoji (in dictionary order) that lists it."""
    index: Dict[str, str] = {}
    for emoji, words in dictionary.entries.items():
        for word in words:
            index.setdefault(word.lower(), emoji)
    return index


def translate_text(text: str, dictionary: EmojiDictionary, index: Optional[Dict[str, str]] = None) -> str:
    """
    Replace every word that has an emoji with that emoji.

    Words without a match are kept as typed. Whitespace runs collapse to a
    single space.
    """
    if not text:
        return ''

    if index is None:
        index = build_word_index(dictionary)

    translated = []
    for word in text.split():
        cleaned = clean_word(word)
        translated.append(index.get(cleaned, word) if cleaned else word)
    return ' '.join(translated)
