"""
Single source of truth for the package version and the dictionary file format.

The dictionary file records the format version it was written with so that
older files can be recognised on load. All version references should import
from here.
"""

import re
from typing import Dict

__version__ = "0.3.0"

DICTIONARY_FORMAT_VERSION = "2.0.0"

FORMAT_CHANGELOG: Dict[str, Dict[str, str]] = {
    "2.0.0": {
        "date": "2025-03-02",
        "changes": "Dictionary stored as JSON grouped by category and written atomically, replacing the JavaScript module that was patched by text matching"
    },
    "1.0.0": {
        "date": "2025-02-14",
        "changes": "Initial dictionary: emoji keys mapped to word arrays in emojiDictionary.js"
    }
}


def get_version() -> str:
    """Get current dictionary format version."""
    return DICTIONARY_FORMAT_VERSION


def get_changelog(version: str = None) -> str:
    """
    Get changelog for a specific format version or all versions.

    Args:
        version: Specific version to get changelog for. If None, returns all.

    Returns:
        Formatted changelog string
    """
    if version:
        if version not in FORMAT_CHANGELOG:
            return f"No changelog found for version {version}"
        entry = FORMAT_CHANGELOG[version]
        return f"v{version} ({entry['date']}): {entry['changes']}"

    lines = ["Dictionary Format Changelog", "=" * 50]
    for ver in sorted(FORMAT_CHANGELOG.keys(), reverse=True):
        entry = FORMAT_CHANGELOG[ver]
        lines.append(f"\nv{ver} ({entry['date']}):")
        lines.append(f"  {entry['changes']}")
    return "\n".join(lines)


def validate_version_format(version: str) -> bool:
    """Validate version follows semantic versioning format (X.Y.Z)."""
    return bool(re.match(r'^\d+\.\d+\.\d+$', version or ''))


def is_compatible(version: str) -> bool:
    """True if a file written with `version` can be read by this release."""
    if not validate_version_format(version):
        return False
    return version.split('.')[0] == DICTIONARY_FORMAT_VERSION.split('.')[0]
