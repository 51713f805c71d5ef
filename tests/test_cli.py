"""Tests for the command line entry point."""
import io
import json
import shlex
import sys
import pytest
import requests
from unittest.mock import patch

from emoji_words.cli import build_parser, main
from emoji_words.dictionary import load_dictionary


@pytest.fixture(autouse=True)
def no_logging_setup():
    """Leave pytest's log handlers in place."""
    with patch('emoji_words.cli.setup_logging') as mock_logging:
        yield mock_logging


@pytest.fixture
def data_dir(tmp_path, monkeypatch):
    monkeypatch.setenv('EMOJI_WORDS_DATA_DIR', str(tmp_path))
    return tmp_path


class TestParser:
    """Tests for argument parsing."""

    def test_generate_offset_optional(self):
        assert build_parser().parse_args(['generate']).offset is None
        assert build_parser().parse_args(['generate', '8']).offset == '8'

    def test_merge_defaults(self):
        args = build_parser().parse_args(['merge'])
        assert args.overwrite is False
        assert args.category == 'Generated Emoji'

    def test_command_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_invalid_format_rejected(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(['extract', '--format', 'verbose'])


class TestExtract:
    """Tests for the extract command."""

    def test_writes_universe(self, data_dir):
        main(['extract', '--format', 'minimal'])
        universe = json.loads((data_dir / 'allEmoji.json').read_text(encoding='utf-8'))
        assert universe[0] == '😀'
        assert len(universe) == len(set(universe))

    def test_compare_marks_dictionary_emoji(self, data_dir, dictionary_file):
        main(['extract', '--compare', '--output', str(data_dir / 'out.json')])
        records = json.loads((data_dir / 'out.json').read_text(encoding='utf-8'))
        by_emoji = {record['emoji']: record for record in records}
        assert by_emoji['😀']['inDictionary'] is True
        assert by_emoji['😁']['inDictionary'] is False

    def test_compare_without_dictionary(self, data_dir):
        main(['extract', '--compare'])
        records = json.loads((data_dir / 'allEmoji.json').read_text(encoding='utf-8'))
        assert not any(record['inDictionary'] for record in records)

    @patch('emoji_words.cli.load_qualified_code_points', return_value={'😀', '☺'})
    def test_qualified_only(self, mock_load, data_dir):
        main(['extract', '--qualified-only', '--format', 'minimal'])
        universe = json.loads((data_dir / 'allEmoji.json').read_text(encoding='utf-8'))
        assert universe == ['😀', '☺']

    @patch('emoji_words.cli.load_qualified_code_points', side_effect=requests.ConnectionError('offline'))
    def test_download_failure_exits(self, mock_load, data_dir):
        with pytest.raises(SystemExit) as exc_info:
            main(['extract', '--qualified-only'])
        assert exc_info.value.code == 1


class TestGenerate:
    """Tests for the generate command."""

    def test_missing_universe_exits(self, data_dir):
        with pytest.raises(SystemExit) as exc_info:
            main(['generate'])
        assert exc_info.value.code == 1

    def test_batch_with_failing_generator(self, data_dir, monkeypatch, ten_emoji):
        (data_dir / 'allEmoji.json').write_text(json.dumps(ten_emoji), encoding='utf-8')
        failing = shlex.join([sys.executable, '-c', 'import sys; sys.exit(1)'])
        monkeypatch.setenv('EMOJI_GENERATOR_COMMAND', failing)
        monkeypatch.setenv('EMOJI_MIN_WORDS', '2')
        monkeypatch.setenv('EMOJI_MAX_WORDS', '3')

        main(['generate', '8'])

        batch = json.loads((data_dir / 'generated_words' / 'emoji_words_8_9.json').read_text(encoding='utf-8'))
        assert list(batch) == ['🎲', '⚽']
        assert all(2 <= len(words) <= 3 for words in batch.values())
        state = json.loads((data_dir / 'emoji_generator_state.json').read_text(encoding='utf-8'))
        assert state['currentOffset'] == 10

    def test_invalid_config_exits(self, data_dir, monkeypatch):
        monkeypatch.setenv('EMOJI_BATCH_SIZE', '0')
        with pytest.raises(SystemExit) as exc_info:
            main(['generate'])
        assert exc_info.value.code == 1


class TestMerge:
    """Tests for the merge command."""

    def test_merge(self, data_dir, dictionary_file):
        generated = data_dir / 'generated_words'
        generated.mkdir()
        (generated / 'emoji_words_0_3.json').write_text(
            json.dumps({'😀': ['happy'], '🍕': ['pizza']}), encoding='utf-8'
        )

        main(['merge', '--category', 'Food'])

        dictionary = load_dictionary(dictionary_file)
        assert dictionary.get('😀') == ['smile']
        assert dictionary.categories['🍕'] == 'Food'
        assert (data_dir / 'emojiDictionary.backup.json').exists()

    def test_merge_overwrite(self, data_dir, dictionary_file):
        generated = data_dir / 'generated_words'
        generated.mkdir()
        (generated / 'emoji_words_0_3.json').write_text(json.dumps({'😀': ['happy']}), encoding='utf-8')

        main(['merge', '--overwrite'])

        assert load_dictionary(dictionary_file).get('😀') == ['happy']

    def test_missing_dictionary_exits(self, data_dir):
        (data_dir / 'generated_words').mkdir()
        with pytest.raises(SystemExit) as exc_info:
            main(['merge'])
        assert exc_info.value.code == 1

    def test_missing_generated_dir_exits(self, data_dir, dictionary_file):
        with pytest.raises(SystemExit) as exc_info:
            main(['merge'])
        assert exc_info.value.code == 1


class TestTranslate:
    """Tests for the translate command."""

    def test_arguments(self, data_dir, dictionary_file, capsys):
        main(['translate', 'my', 'dog', 'laughs', 'lol'])
        assert capsys.readouterr().out.strip().splitlines()[-1] == 'my 🐶 laughs 😂'

    def test_stdin(self, data_dir, dictionary_file, capsys, monkeypatch):
        monkeypatch.setattr('sys.stdin', io.StringIO('cat smile\n'))
        main(['translate'])
        assert capsys.readouterr().out.strip().splitlines()[-1] == '🐱 😀'
