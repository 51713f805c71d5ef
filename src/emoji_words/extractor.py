"""Emoji extraction from fixed Unicode code-point ranges."""
import json
import unicodedata
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Set, Tuple, Union

from emoji_words.utils import MissingPrerequisiteError, ValidationError, get_logger

logger = get_logger(__name__)

CodeRange = Tuple[int, int]

# Inclusive (start, end) pairs, scanned in this order
DEFAULT_RANGES: List[CodeRange] = [
    (0x1F600, 0x1F64F),  # Emoticons
    (0x1F300, 0x1F5FF),  # Misc Symbols and Pictographs
    (0x1F680, 0x1F6FF),  # Transport and Map
    (0x1F700, 0x1F77F),  # Alchemical Symbols
    (0x1F780, 0x1F7FF),  # Geometric Shapes Extended
    (0x1F800, 0x1F8FF),  # Supplemental Arrows-C
    (0x1F900, 0x1F9FF),  # Supplemental Symbols and Pictographs
    (0x1FA00, 0x1FA6F),  # Chess Symbols
    (0x1FA70, 0x1FAFF),  # Symbols and Pictographs Extended-A
    (0x2600, 0x26FF),    # Misc Symbols
    (0x2700, 0x27BF),    # Dingbats
    (0x2B00, 0x2BFF),    # Misc Symbols and Arrows
    (0x3000, 0x303F),    # CJK Symbols and Punctuation
    (0xFE00, 0xFE0F),    # Variation Selectors
]

# First matching category wins, so order matters
CATEGORY_RANGES: List[Tuple[str, List[CodeRange]]] = [
    ('Smileys & Emotion', [(0x1F600, 0x1F64F)]),
    ('People & Body', [(0x1F90C, 0x1F9FF)]),
    ('Animals & Nature', [(0x1F400, 0x1F43F), (0x1F980, 0x1F9AF)]),
    ('Food & Drink', [(0x1F32D, 0x1F37F), (0x1F95F, 0x1F9AA)]),
    ('Travel & Places', [(0x1F30D, 0x1F320), (0x1F680, 0x1F6FF)]),
    ('Activities', [(0x1F380, 0x1F3FF), (0x1F93C, 0x1F93F)]),
    ('Objects', [(0x1F4A0, 0x1F4FF), (0x1F950, 0x1F95E)]),
    ('Symbols', [(0x1F300, 0x1F5FF), (0x1F500, 0x1F53D)]),
]

OTHER_CATEGORY = 'Other'

RECORD_FORMATS = ('full', 'simple', 'minimal')

# Letters, numbers, punctuation, separators; plus unassigned and surrogates
_EXCLUDED_CATEGORY_PREFIXES = ('L', 'N', 'P', 'Z')
_EXCLUDED_CATEGORIES = ('Cn', 'Cs')


def looks_like_emoji(char: str) -> bool:
    """
    Heuristic check for emoji-like characters.

    Not a Unicode emoji property lookup: it only rejects characters whose
    general category says they are text.
    """
    if not char or char.isspace():
        return False
    category = unicodedata.category(char)
    if category in _EXCLUDED_CATEGORIES:
        return False
    return not category.startswith(_EXCLUDED_CATEGORY_PREFIXES)


def enumerate_emoji(ranges: Sequence[CodeRange] = DEFAULT_RANGES,
                    filter_likely: bool = True,
                    allowed: Optional[Set[str]] = None) -> List[str]:
    """
    Enumerate emoji candidates from inclusive code-point ranges.

    Args:
        ranges: (start, end) pairs, both ends inclusive
        filter_likely: drop characters that look like text (see looks_like_emoji)
        allowed: if given, keep only characters in this set

    Returns:
        Emoji in range-table order, duplicates removed (first occurrence kept)
    """
    seen: Set[str] = set()
    result: List[str] = []

    for start, end in ranges:
        for code_point in range(start, end + 1):
            try:
                char = chr(code_point)
            except (ValueError, OverflowError) as e:
                logger.error(f"Error processing code point {code_point:X}: {e}")
                continue

            if filter_likely and not looks_like_emoji(char):
                continue
            if allowed is not None and char not in allowed:
                continue
            if char in seen:
                continue

            seen.add(char)
            result.append(char)

    return result


def categorize(emoji: str) -> str:
    """Return the category label for an emoji, or 'Other'."""
    if not emoji:
        return OTHER_CATEGORY
    code_point = ord(emoji[0])
    for category, ranges in CATEGORY_RANGES:
        if any(start <= code_point <= end for start, end in ranges):
            return category
    return OTHER_CATEGORY


def group_by_category(emojis: Iterable[str]) -> Dict[str, List[str]]:
    """Group emoji by category label, keeping category table order."""
    groups: Dict[str, List[str]] = {category: [] for category, _ in CATEGORY_RANGES}
    groups[OTHER_CATEGORY] = []
    for emoji in emojis:
        groups[categorize(emoji)].append(emoji)
    return groups


def format_code_point(emoji: str) -> str:
    """Format the first code point of an emoji as U+XXXX."""
    return f"U+{ord(emoji[0]):04X}"


def estimate_unicode_version(code_point: int) -> str:
    """Rough Unicode version estimate from the code-point block."""
    if code_point < 0x1F300:
        return "1.1 - 4.0"
    if code_point < 0x1F600:
        return "6.0"
    if code_point < 0x1F900:
        return "7.0 - 8.0"
    if code_point < 0x1FA00:
        return "10.0 - 11.0"
    return "12.0+"


def build_records(emojis: Sequence[str], fmt: str = 'full',
                  known: Optional[Iterable[str]] = None) -> List[Any]:
    """
    Build the universe artifact in one of the supported formats.

    Args:
        emojis: enumerated emoji
        fmt: 'full', 'simple' or 'minimal'
        known: emoji already in the dictionary; fills `inDictionary` for 'full'

    Returns:
        List of bare strings (minimal) or record dictionaries
    """
    if fmt not in RECORD_FORMATS:
        raise ValueError(f"Unknown format: {fmt}. Expected one of {RECORD_FORMATS}")

    if fmt == 'minimal':
        return list(emojis)

    if fmt == 'simple':
        return [{'emoji': emoji, 'codePoint': format_code_point(emoji)} for emoji in emojis]

    known_set = set(known) if known is not None else set()
    return [
        {
            'emoji': emoji,
            'codePoint': format_code_point(emoji),
            'category': categorize(emoji),
            'unicodeVersion': estimate_unicode_version(ord(emoji[0])),
            'inDictionary': emoji in known_set,
        }
        for emoji in emojis
    ]


def find_missing(emojis: Iterable[str], known: Iterable[str]) -> List[str]:
    """Emoji that are not present in `known`, in input order."""
    known_set = set(known)
    return [emoji for emoji in emojis if emoji not in known_set]


def _item_to_emoji(item: Any) -> Optional[str]:
    if isinstance(item, str):
        return item if item.strip() else None
    if isinstance(item, dict):
        emoji = item.get('emoji')
        if isinstance(emoji, str) and emoji.strip():
            return emoji
    return None


def load_emoji_universe(path: Union[str, Path]) -> List[str]:
    """
    Load the ordered emoji universe produced by the extract command.

    Items may be bare emoji strings or objects with an `emoji` field.
    Unusable items are skipped so that offsets stay stable between runs.

    Raises:
        MissingPrerequisiteError: If the file does not exist
        ValidationError: If the document is not a JSON list
    """
    path = Path(path)
    if not path.exists():
        raise MissingPrerequisiteError(f"{path} not found. Run the extract command first.")

    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValidationError(f"Emoji universe {path} is not valid JSON: {e}")

    if not isinstance(data, list):
        raise ValidationError(f"Emoji universe {path} must be a JSON array")

    universe = []
    for index, item in enumerate(data):
        emoji = _item_to_emoji(item)
        if emoji is None:
            logger.warning(f"Skipping unusable universe item at index {index}: {item!r}")
            continue
        universe.append(emoji)

    return universe
