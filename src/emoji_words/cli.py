"""Command line entry point: extract, generate, merge, translate."""
import argparse
import sys
from pathlib import Path
from typing import List, Optional

import requests

from emoji_words.dictionary import (
    DEFAULT_CATEGORY,
    DictionaryFormatError,
    load_dictionary,
    merge_batch_directory,
)
from emoji_words.extractor import (
    RECORD_FORMATS,
    build_records,
    enumerate_emoji,
    find_missing,
    group_by_category,
    load_emoji_universe,
)
from emoji_words.generator import WordGenerator, generate_next_batch
from emoji_words.state import OffsetStore
from emoji_words.translator import translate_text
from emoji_words.unicode_data import load_qualified_code_points
from emoji_words.utils import (
    ConfigError,
    MissingPrerequisiteError,
    ValidationError,
    get_logger,
    load_config,
    setup_logging,
    write_json_atomic,
)

logger = get_logger(__name__)


def _known_emoji(dictionary_path: Path) -> List[str]:
    """Dictionary keys, or an empty list when the dictionary cannot be loaded."""
    try:
        return load_dictionary(dictionary_path).emoji()
    except (MissingPrerequisiteError, DictionaryFormatError) as e:
        logger.warning(f"Failed to load emoji dictionary: {e}")
        return []


def run_extract(args: argparse.Namespace, config: dict) -> None:
    """Enumerate emoji and write the universe artifact."""
    logger.info("Extracting emoji from Unicode planes...")

    allowed = load_qualified_code_points() if args.qualified_only else None
    emojis = enumerate_emoji(filter_likely=not args.no_filter, allowed=allowed)
    logger.info(f"Found {len(emojis)} emoji characters")

    known = None
    if args.compare:
        logger.info("Comparing with current emoji dictionary...")
        known = _known_emoji(config['dictionary_path'])
        missing = find_missing(emojis, known)
        logger.info(f"Emoji in dictionary: {len(emojis) - len(missing)}")
        logger.info(f"Emoji not in dictionary: {len(missing)}")
        if missing:
            logger.info(f"Sample of missing emoji (first 20): {' '.join(missing[:20])}")

    records = build_records(emojis, args.format, known=known)

    output = Path(args.output) if args.output else config['universe_path']
    logger.info(f"Writing emoji data to {output.resolve()}...")
    write_json_atomic(output, records)
    logger.info(f"✅ Total emoji saved: {len(records)}")

    for category, members in group_by_category(emojis).items():
        logger.info(f"{category}: {len(members)} emoji")


def run_generate(args: argparse.Namespace, config: dict) -> None:
    """Generate words for the next batch of the universe."""
    output_dir = config['output_dir']
    output_dir.mkdir(parents=True, exist_ok=True)

    logger.info(f"Loading emoji from {config['universe_path']}...")
    universe = load_emoji_universe(config['universe_path'])

    generator = WordGenerator(
        command=config['generator_command'],
        min_words=config['min_words'],
        max_words=config['max_words'],
        timeout=config['timeout'],
        kill_grace=config['kill_grace'],
    )
    store = OffsetStore(config['state_path'])

    batch = generate_next_batch(
        universe, store, generator, output_dir,
        batch_size=config['batch_size'], cli_offset=args.offset,
    )
    logger.info(f"✅ Batch {batch.start}-{batch.end} complete with {len(batch.words)} emoji")


def run_merge(args: argparse.Namespace, config: dict) -> None:
    """Merge generated batch files into the dictionary."""
    logger.info(f"Options: overwrite={args.overwrite}, category={args.category!r}")
    report = merge_batch_directory(
        config['dictionary_path'],
        config['output_dir'],
        backup_path=config['backup_path'],
        overwrite=args.overwrite,
        category=args.category,
    )
    for line in report.summary().splitlines():
        logger.info(line)
    logger.info(f"Original dictionary backed up to {config['backup_path']}")


def run_translate(args: argparse.Namespace, config: dict) -> None:
    """Print text with known words replaced by emoji."""
    dictionary = load_dictionary(config['dictionary_path'])
    text = ' '.join(args.text) if args.text else sys.stdin.read()
    print(translate_text(text, dictionary))


COMMANDS = {
    'extract': run_extract,
    'generate': run_generate,
    'merge': run_merge,
    'translate': run_translate,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Emoji word dictionary tools')
    parser.add_argument('--log-level', help='Logging level. Default: LOG_LEVEL or INFO')
    parser.add_argument('--structured-logs', action='store_true', default=None,
                        help='Emit JSON log lines')
    subparsers = parser.add_subparsers(dest='command', required=True)

    extract = subparsers.add_parser('extract', help='Extract emoji from Unicode ranges to JSON')
    extract.add_argument('--output', '-o', help='Output file. Default: EMOJI_UNIVERSE_PATH')
    extract.add_argument('--format', '-f', choices=RECORD_FORMATS, default='full',
                         help='Output format. Default: full')
    extract.add_argument('--compare', '-c', action='store_true',
                         help='Mark emoji already present in the dictionary')
    extract.add_argument('--no-filter', action='store_true',
                         help='Keep every code point in the ranges, including text characters')
    extract.add_argument('--qualified-only', action='store_true',
                         help='Keep only emoji listed as fully-qualified by unicode.org')

    generate = subparsers.add_parser('generate', help='Generate words for the next batch of emoji')
    generate.add_argument('offset', nargs='?',
                          help='Starting offset. Default: value in state file or 0')

    merge = subparsers.add_parser('merge', help='Merge generated words into the dictionary')
    merge.add_argument('--overwrite', action='store_true',
                       help='Overwrite existing emoji entries')
    merge.add_argument('--category', default=DEFAULT_CATEGORY,
                       help=f'Category for new emoji. Default: "{DEFAULT_CATEGORY}"')

    translate = subparsers.add_parser('translate', help='Replace words in text with emoji')
    translate.add_argument('text', nargs='*', help='Text to translate. Default: read stdin')

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point with command selection."""
    args = build_parser().parse_args(argv)

    try:
        config = load_config()
    except ConfigError as e:
        setup_logging()
        logger.error(f"Configuration error: {e}")
        sys.exit(1)

    structured = config['structured_logging'] if args.structured_logs is None else args.structured_logs
    setup_logging(level=args.log_level or config['log_level'], structured=structured)

    try:
        COMMANDS[args.command](args, config)
    except MissingPrerequisiteError as e:
        logger.error(f"Error: {e}")
        sys.exit(1)
    except ValidationError as e:
        logger.error(f"Invalid input: {e}")
        sys.exit(1)
    except requests.RequestException as e:
        logger.error(f"Download failed: {e}")
        sys.exit(1)
    except Exception as e:
        logger.error(f"{args.command} failed: {e}")
        sys.exit(1)


if __name__ == '__main__':
    main()
