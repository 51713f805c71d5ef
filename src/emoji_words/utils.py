"""Utility modules: config, logging, validation, errors, JSON file IO."""
import os
import json
import logging
import shlex
import sys
import tempfile
from pathlib import Path
from typing import Dict, Any, List, Optional, Union

from dotenv import load_dotenv

# Load .env file for local development
load_dotenv()

logger = logging.getLogger(__name__)


# ============================================================================
# ERRORS
# ============================================================================

class ConfigError(Exception):
    """Raised when configuration is invalid."""
    pass


class ValidationError(Exception):
    """Raised when data validation fails."""
    pass


class MissingPrerequisiteError(Exception):
    """Raised when a required input file or directory does not exist."""
    pass


# ============================================================================
# CONFIGURATION
# ============================================================================

DEFAULT_GENERATOR_COMMAND = 'claude -p'


def safe_cast(value: Any, target_type: type, default: Any = None) -> Any:
    """Safely cast value to target type with fallback."""
    if value is None:
        return default

    try:
        if target_type == bool:
            if isinstance(value, str):
                return value.strip().lower() in ('true', '1', 'yes')
            return bool(value)
        elif target_type == int:
            return int(float(value))  # Handle "123.0" strings
        elif target_type == float:
            return float(value)
        elif target_type == str:
            return str(value)
        else:
            return target_type(value)
    except (ValueError, TypeError, OverflowError):
        logger.warning(f"Failed to cast {value!r} to {target_type.__name__}, using default {default}")
        return default


def load_config() -> Dict[str, Any]:
    """
    Load configuration from environment variables.

    Paths default to files inside EMOJI_WORDS_DATA_DIR (the current
    directory when unset).

    Returns:
        Dictionary of validated configuration values

    Raises:
        ConfigError: If any numeric setting is out of range
    """
    data_dir = Path(os.getenv('EMOJI_WORDS_DATA_DIR', '').strip() or '.')

    path_vars = {
        'universe_path': ('EMOJI_UNIVERSE_PATH', 'allEmoji.json'),
        'state_path': ('EMOJI_STATE_PATH', 'emoji_generator_state.json'),
        'output_dir': ('EMOJI_OUTPUT_DIR', 'generated_words'),
        'dictionary_path': ('EMOJI_DICTIONARY_PATH', 'emojiDictionary.json'),
        'backup_path': ('EMOJI_BACKUP_PATH', 'emojiDictionary.backup.json'),
    }

    numeric_vars = {
        'batch_size': ('EMOJI_BATCH_SIZE', int, 4),
        'min_words': ('EMOJI_MIN_WORDS', int, 10),
        'max_words': ('EMOJI_MAX_WORDS', int, 20),
        'timeout': ('EMOJI_GENERATION_TIMEOUT', float, 30.0),
        'kill_grace': ('EMOJI_KILL_GRACE', float, 2.0),
    }

    config: Dict[str, Any] = {'data_dir': data_dir}

    for key, (env_var, filename) in path_vars.items():
        value = os.getenv(env_var, '').strip()
        config[key] = Path(value) if value else data_dir / filename

    for key, (env_var, cast, default) in numeric_vars.items():
        raw = os.getenv(env_var, '').strip()
        config[key] = safe_cast(raw, cast, default) if raw else default

    command = os.getenv('EMOJI_GENERATOR_COMMAND', '').strip() or DEFAULT_GENERATOR_COMMAND
    config['generator_command'] = shlex.split(command)

    config['log_level'] = os.getenv('LOG_LEVEL', 'INFO').strip() or 'INFO'
    config['structured_logging'] = safe_cast(os.getenv('STRUCTURED_LOGGING'), bool, False)

    problems = []
    if config['batch_size'] < 1:
        problems.append(f"EMOJI_BATCH_SIZE must be positive, got {config['batch_size']}")
    if config['min_words'] < 1:
        problems.append(f"EMOJI_MIN_WORDS must be positive, got {config['min_words']}")
    if config['min_words'] > config['max_words']:
        problems.append(
            f"EMOJI_MIN_WORDS ({config['min_words']}) exceeds EMOJI_MAX_WORDS ({config['max_words']})"
        )
    if config['timeout'] <= 0:
        problems.append(f"EMOJI_GENERATION_TIMEOUT must be positive, got {config['timeout']}")
    if config['kill_grace'] < 0:
        problems.append(f"EMOJI_KILL_GRACE cannot be negative, got {config['kill_grace']}")

    if problems:
        raise ConfigError(f"Invalid configuration: {problems}")

    logger.debug("Configuration loaded successfully")
    return config


# ============================================================================
# LOGGING
# ============================================================================

def setup_logging(level: str = "INFO", structured: bool = False) -> None:
    """Configure logging for the application."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    if structured:
        formatter = logging.Formatter(
            '{"timestamp": "%(asctime)s", "name": "%(name)s", "level": "%(levelname)s", "message": "%(message)s"}',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
    else:
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

    # Configure root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    logging.getLogger('urllib3').setLevel(logging.WARNING)
    logging.getLogger('asyncio').setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance for the given name."""
    return logging.getLogger(name)


# ============================================================================
# VALIDATION
# ============================================================================

def is_word_list(value: Any) -> bool:
    """True if value is a non-empty list made only of strings."""
    return (
        isinstance(value, list)
        and len(value) > 0
        and all(isinstance(word, str) for word in value)
    )


def validate_word_list(value: Any, emoji: str = '') -> List[str]:
    """Return value unchanged if it is a valid word list, else raise ValidationError."""
    if not is_word_list(value):
        label = f" for {emoji}" if emoji else ''
        raise ValidationError(f"Invalid word list{label}: expected a non-empty array of strings")
    return value


# ============================================================================
# JSON FILES
# ============================================================================

def read_json(path: Union[str, Path]) -> Any:
    """Read a UTF-8 JSON document."""
    with open(path, 'r', encoding='utf-8') as f:
        return json.load(f)


def write_json_atomic(path: Union[str, Path], data: Any, indent: Optional[int] = 2) -> Path:
    """
    Write JSON to path by writing a temp file in the same directory and
    renaming it over the target.

    Returns:
        The path that was written
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix='.tmp', dir=str(path.parent))
    try:
        with os.fdopen(fd, 'w', encoding='utf-8') as f:
            json.dump(data, f, ensure_ascii=False, indent=indent)
            f.write('\n')
        os.replace(tmp_name, path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise

    return path
