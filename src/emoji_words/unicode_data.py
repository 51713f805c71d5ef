"""Download and parse the official Unicode emoji test file."""
import re
from typing import Iterable, Optional, Set

import requests

from emoji_words.utils import get_logger

logger = get_logger(__name__)

# Official Unicode emoji test data URL
EMOJI_TEST_URL = "https://unicode.org/Public/emoji/latest/emoji-test.txt"

VARIATION_SELECTOR_16 = '\ufe0f'

# Example line: 1F600 ; fully-qualified # 😀 E1.0 grinning face
_FULLY_QUALIFIED = re.compile(r'^([0-9A-F ]+)\s*;\s*fully-qualified\s*#\s*(\S+)', re.MULTILINE)


def fetch_emoji_test(url: str = EMOJI_TEST_URL, timeout: float = 30,
                     session: Optional[requests.Session] = None) -> str:
    """Download the emoji test file and return its text."""
    if session is None:
        with requests.Session() as http:
            return fetch_emoji_test(url, timeout, http)

    logger.info(f"Downloading emoji data from {url}...")
    response = session.get(url, timeout=timeout, headers={'User-Agent': 'emoji-words/0.3 Python/requests'})
    response.raise_for_status()
    response.encoding = 'utf-8'
    return response.text


def parse_emoji_test(data: str) -> Set[str]:
    """
    Extract fully-qualified emoji from emoji-test.txt content.

    Component, minimally-qualified and unqualified lines are ignored.
    """
    return {match.group(2) for match in _FULLY_QUALIFIED.finditer(data)}


def single_code_point_emoji(emojis: Iterable[str]) -> Set[str]:
    """Emoji that are a single scalar value once U+FE0F is removed."""
    singles = set()
    for emoji in emojis:
        base = emoji.replace(VARIATION_SELECTOR_16, '')
        if len(base) == 1:
            singles.add(base)
    return singles


def load_qualified_code_points(url: str = EMOJI_TEST_URL, timeout: float = 30,
                               session: Optional[requests.Session] = None) -> Set[str]:
    """Fetch the test file and return its single-code-point emoji."""
    emojis = parse_emoji_test(fetch_emoji_test(url, timeout=timeout, session=session))
    singles = single_code_point_emoji(emojis)
    logger.info(f"Unicode lists {len(emojis)} fully-qualified emoji, {len(singles)} single code points")
    return singles
