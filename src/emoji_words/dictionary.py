"""Emoji dictionary persistence and merging of generated word batches."""
import json
import re
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from emoji_words.utils import (
    MissingPrerequisiteError,
    ValidationError,
    get_logger,
    is_word_list,
    read_json,
    write_json_atomic,
)
from emoji_words.version import DICTIONARY_FORMAT_VERSION, is_compatible

logger = get_logger(__name__)

DEFAULT_CATEGORY = 'Generated Emoji'

_BATCH_FILE = re.compile(r'^emoji_words_(\d+)_(\d+)\.json$')


class DictionaryFormatError(ValidationError):
    """Raised when a dictionary document does not have the expected structure."""
    pass


# ============================================================================
# DICTIONARY
# ============================================================================

class EmojiDictionary:
    """Emoji to word list mapping, with a category label per emoji."""

    def __init__(self):
        self.entries: Dict[str, List[str]] = {}
        self.categories: Dict[str, str] = {}

    def __contains__(self, emoji: str) -> bool:
        return emoji in self.entries

    def __len__(self) -> int:
        return len(self.entries)

    def get(self, emoji: str, default: Optional[List[str]] = None) -> Optional[List[str]]:
        return self.entries.get(emoji, default)

    def emoji(self) -> List[str]:
        return list(self.entries)

    def add(self, emoji: str, words: List[str], category: str = DEFAULT_CATEGORY) -> None:
        """Insert or replace an entry. A replaced entry keeps its category."""
        self.entries[emoji] = list(words)
        self.categories.setdefault(emoji, category)

    def grouped(self) -> Dict[str, Dict[str, List[str]]]:
        """Entries grouped by category, in insertion order."""
        groups: Dict[str, Dict[str, List[str]]] = {}
        for emoji, words in self.entries.items():
            groups.setdefault(self.categories[emoji], {})[emoji] = words
        return groups

    def to_dict(self) -> Dict[str, Any]:
        return {'version': DICTIONARY_FORMAT_VERSION, 'categories': self.grouped()}

    @classmethod
    def from_dict(cls, data: Any) -> 'EmojiDictionary':
        """
        Build a dictionary from its persisted form.

        Raises:
            DictionaryFormatError: If the document structure is wrong
        """
        if not isinstance(data, dict) or not isinstance(data.get('categories'), dict):
            raise DictionaryFormatError("Dictionary must be an object with a 'categories' object")

        version = data.get('version', DICTIONARY_FORMAT_VERSION)
        if not is_compatible(str(version)):
            raise DictionaryFormatError(
                f"Unsupported dictionary format version {version}, expected {DICTIONARY_FORMAT_VERSION}"
            )

        dictionary = cls()
        for category, group in data['categories'].items():
            if not isinstance(group, dict):
                raise DictionaryFormatError(f"Category '{category}' must map emoji to word arrays")
            for emoji, words in group.items():
                if not is_word_list(words):
                    logger.warning(f"Skipping emoji {emoji}: Invalid or empty word list")
                    continue
                if emoji in dictionary:
                    logger.warning(f"Duplicate emoji {emoji} in category '{category}', keeping first entry")
                    continue
                dictionary.add(emoji, words, category)

        return dictionary


def load_dictionary(path: Union[str, Path]) -> EmojiDictionary:
    """
    Load the dictionary file.

    Raises:
        MissingPrerequisiteError: If the file does not exist
        DictionaryFormatError: If the file is not a valid dictionary
    """
    path = Path(path)
    if not path.exists():
        raise MissingPrerequisiteError(f"Dictionary file not found at {path}")

    try:
        data = read_json(path)
    except json.JSONDecodeError as e:
        raise DictionaryFormatError(f"Dictionary {path} is not valid JSON: {e}")

    return EmojiDictionary.from_dict(data)


def save_dictionary(dictionary: EmojiDictionary, path: Union[str, Path],
                    backup_path: Optional[Union[str, Path]] = None) -> Path:
    """Write the dictionary atomically, first copying the current file to backup_path."""
    path = Path(path)
    if backup_path is not None and path.exists():
        Path(backup_path).parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(path, backup_path)
        logger.info(f"Created backup at {backup_path}")
    return write_json_atomic(path, dictionary.to_dict())


# ============================================================================
# MERGE
# ============================================================================

@dataclass
class MergeReport:
    """Counts from merging one or more batches."""
    added: int = 0
    updated: int = 0
    skipped: int = 0
    files: int = 0
    failed_files: int = 0
    total: int = 0

    def summary(self) -> str:
        return "\n".join([
            "Merge Summary:",
            f"  New emoji added: {self.added}",
            f"  Existing emoji updated: {self.updated}",
            f"  Emoji skipped: {self.skipped}",
            f"  Batch files merged: {self.files} ({self.failed_files} unreadable)",
            f"  Total emoji in dictionary: {self.total}",
        ])


def merge_words(dictionary: EmojiDictionary, words: Mapping[str, Any], overwrite: bool = False,
                category: str = DEFAULT_CATEGORY, report: Optional[MergeReport] = None) -> MergeReport:
    """
    Fold one batch of generated words into the dictionary.

    New emoji are added under `category`. Existing emoji are replaced only
    when `overwrite` is set, and keep their original category.
    """
    report = report or MergeReport()

    for emoji, word_list in words.items():
        if not is_word_list(word_list):
            logger.warning(f"Skipping emoji {emoji}: Invalid or empty word list")
            report.skipped += 1
            continue

        if emoji in dictionary:
            if overwrite:
                dictionary.add(emoji, word_list, category)
                report.updated += 1
                logger.info(f"Updated existing emoji: {emoji} with {len(word_list)} words")
            else:
                logger.info(f"Skipping existing emoji: {emoji}")
                report.skipped += 1
        else:
            dictionary.add(emoji, word_list, category)
            report.added += 1
            logger.info(f"Added new emoji: {emoji} with {len(word_list)} words")

    report.total = len(dictionary)
    return report


def _batch_sort_key(path: Path) -> Tuple[int, int, str]:
    match = _BATCH_FILE.match(path.name)
    if match:
        return 0, int(match.group(1)), path.name
    return 1, 0, path.name


def list_batch_files(directory: Union[str, Path]) -> List[Path]:
    """JSON files in directory, batch files first in offset order."""
    directory = Path(directory)
    if not directory.is_dir():
        raise MissingPrerequisiteError(f"Generated words directory not found at {directory}")
    return sorted(directory.glob('*.json'), key=_batch_sort_key)


def load_batch_files(directory: Union[str, Path]) -> Iterable[Tuple[Path, Optional[Dict[str, Any]]]]:
    """
    Yield (path, words) for each batch file.

    words is None when the file cannot be read or is not a JSON object.
    """
    for path in list_batch_files(directory):
        try:
            data = read_json(path)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning(f"Error processing {path}: {e}")
            yield path, None
            continue

        if not isinstance(data, dict):
            logger.warning(f"Error processing {path}: expected a JSON object")
            yield path, None
            continue

        yield path, data


def merge_batch_directory(dictionary_path: Union[str, Path], generated_dir: Union[str, Path],
                          backup_path: Optional[Union[str, Path]] = None, overwrite: bool = False,
                          category: str = DEFAULT_CATEGORY) -> MergeReport:
    """
    Merge every batch file in generated_dir into the dictionary file.

    Raises:
        MissingPrerequisiteError: If the dictionary or directory is missing
    """
    dictionary = load_dictionary(dictionary_path)
    logger.info(f"Found {len(dictionary)} emoji in dictionary")

    # Fail on a missing directory before anything is written
    files = list_batch_files(generated_dir)
    logger.info(f"Found {len(files)} generated word files")

    report = MergeReport()
    for path, words in load_batch_files(generated_dir):
        logger.info(f"Processing {path.name}...")
        if words is None:
            report.failed_files += 1
            continue
        merge_words(dictionary, words, overwrite=overwrite, category=category, report=report)
        report.files += 1

    report.total = len(dictionary)
    save_dictionary(dictionary, dictionary_path, backup_path)
    logger.info(f"Updated dictionary saved to {dictionary_path}")
    return report
