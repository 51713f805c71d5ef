"""Batch word generation through an external text-generation CLI."""
import asyncio
import json
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple, Union

from emoji_words.state import OffsetState, OffsetStore
from emoji_words.utils import (
    DEFAULT_GENERATOR_COMMAND,
    ValidationError,
    get_logger,
    is_word_list,
    write_json_atomic,
)

logger = get_logger(__name__)

_CODE_FENCE = re.compile(r'```(?:json)?\s*([\s\S]*?)\s*```')


# ============================================================================
# PROMPT AND RESPONSE
# ============================================================================

def build_prompt(emoji: str, min_words: int, max_words: int) -> str:
    """Single-line prompt asking for a bare JSON array of words."""
    return (
        f"I need {min_words}-{max_words} relevant words or phrases that correspond to the emoji: {emoji}. "
        "The words should be: Common English words or phrases; "
        "A mix of nouns, verbs, adjectives, and common expressions; "
        "Relevant to what the emoji visually represents or is commonly used for; "
        "Lowercase and without punctuation; One to three words each (for phrases). "
        "Please respond in this exact format, with just a JSON array of strings, NOTHING ELSE: "
        '["word1", "word2", "word3", ...]. Do not consume more context.'
    )


def parse_word_response(text: str) -> List[str]:
    """
    Parse generator output into a list of lowercase words.

    Accepts a bare JSON array or one wrapped in a ``` / ```json fence.

    Raises:
        ValidationError: If the output is not a JSON array of strings
    """
    payload = (text or '').strip()
    match = _CODE_FENCE.search(payload)
    if match:
        payload = match.group(1).strip()

    try:
        words = json.loads(payload)
    except (json.JSONDecodeError, RecursionError) as e:
        raise ValidationError(f"Response is not valid JSON: {e}")

    if not isinstance(words, list):
        raise ValidationError("Response is not an array")
    if not all(isinstance(word, str) for word in words):
        raise ValidationError("Response array contains non-string items")

    return [word.strip().lower() for word in words if word.strip()]


def placeholder_word(emoji: str, index: int) -> str:
    """Synthetic word number `index` (1-based) for an emoji."""
    return f"word{index}_for_{ord(emoji[0]):x}"


def generate_fallback_words(emoji: str, min_words: int, max_words: int) -> List[str]:
    """
    Deterministic placeholder words used when generation fails.

    The count depends only on the emoji's code point, so reruns produce the
    same list.
    """
    span = max_words - min_words + 1
    count = min_words + ord(emoji[0]) % span
    return [placeholder_word(emoji, i + 1) for i in range(count)]


def fit_word_count(emoji: str, words: List[str], min_words: int, max_words: int) -> List[str]:
    """Pad with placeholders up to min_words, then truncate to max_words."""
    fitted = list(words)
    if len(fitted) < min_words:
        logger.warning(f"Only got {len(fitted)} words for {emoji}, expected at least {min_words}")
        while len(fitted) < min_words:
            fitted.append(placeholder_word(emoji, len(fitted) + 1))
    return fitted[:max_words]


# ============================================================================
# GENERATOR
# ============================================================================

class WordGenerator:
    """Runs the external generator once per emoji, with timeout and fallback."""

    def __init__(self, command: Optional[Sequence[str]] = None, min_words: int = 10,
                 max_words: int = 20, timeout: float = 30.0, kill_grace: float = 2.0):
        if min_words < 1 or min_words > max_words:
            raise ValueError(f"Invalid word bounds: min={min_words}, max={max_words}")
        self.command = list(command) if command else DEFAULT_GENERATOR_COMMAND.split()
        self.min_words = min_words
        self.max_words = max_words
        self.timeout = timeout
        self.kill_grace = kill_grace

    def fallback(self, emoji: str) -> List[str]:
        logger.warning(f"Using fallback word generation for {emoji}")
        return generate_fallback_words(emoji, self.min_words, self.max_words)

    async def _terminate(self, process: asyncio.subprocess.Process) -> None:
        """SIGTERM, then SIGKILL if the process outlives the grace window."""
        if process.returncode is not None:
            return
        try:
            process.terminate()
        except ProcessLookupError:
            return

        try:
            await asyncio.wait_for(process.wait(), timeout=self.kill_grace)
        except asyncio.TimeoutError:
            logger.warning(f"Generator process {process.pid} ignored SIGTERM, killing it")
            try:
                process.kill()
            except ProcessLookupError:
                return
            await process.wait()

    async def _run(self, prompt: str) -> Optional[str]:
        """Run the command with prompt on stdin. None on any failure."""
        try:
            process = await asyncio.create_subprocess_exec(
                *self.command,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            logger.warning(f"Generator process error: {e}")
            return None

        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(prompt.encode('utf-8')), timeout=self.timeout
            )
        except asyncio.TimeoutError:
            logger.warning(f"Generator request timed out after {self.timeout:g} seconds")
            await self._terminate(process)
            return None

        if process.returncode != 0:
            logger.warning(f"Generator exited with code {process.returncode}")
            error_output = stderr.decode('utf-8', errors='replace').strip()
            if error_output:
                logger.warning(f"Error output: {error_output}")
            return None

        return stdout.decode('utf-8', errors='replace')

    async def generate_words(self, emoji: str) -> List[str]:
        """
        Generate a word list for one emoji.

        Always returns between min_words and max_words entries: any spawn
        failure, timeout, non-zero exit or malformed output falls back to
        placeholder words.

        Raises:
            ValueError: If emoji is empty
        """
        if not emoji or not emoji.strip():
            raise ValueError("Empty emoji provided")

        prompt = build_prompt(emoji, self.min_words, self.max_words)
        logger.debug(prompt)

        output = await self._run(prompt)
        if output is None:
            return self.fallback(emoji)

        try:
            words = parse_word_response(output)
        except ValidationError as e:
            logger.warning(f"Error parsing generator response: {e}")
            logger.warning(f"Raw response: {output}")
            return self.fallback(emoji)

        return fit_word_count(emoji, words, self.min_words, self.max_words)

    async def generate_batch(self, emojis: Sequence[str]) -> Dict[str, List[str]]:
        """Generate words for each emoji, one process at a time."""
        results: Dict[str, List[str]] = {}
        for emoji in emojis:
            logger.info(f"Generating words for emoji: {emoji}")
            words = await self.generate_words(emoji)
            results[emoji] = words
            logger.info(f"Generated {len(words)} words: {', '.join(words)}")
        return results


# ============================================================================
# BATCHES
# ============================================================================

@dataclass
class BatchResult:
    """Words for universe positions [start, end)."""
    start: int
    end: int
    words: Dict[str, List[str]] = field(default_factory=dict)

    @property
    def filename(self) -> str:
        return f"emoji_words_{self.start}_{self.end - 1}.json"

    def save(self, output_dir: Union[str, Path]) -> Path:
        path = Path(output_dir) / self.filename
        if path.exists():
            logger.warning(f"Replacing existing batch file {path}")
        return write_json_atomic(path, self.words)


def slice_batch(universe: Sequence[str], offset: int,
                batch_size: int) -> Tuple[int, int, List[str]]:
    """
    Select the batch starting at offset.

    An offset at or past the end of the universe wraps to 0.

    Returns:
        (start, end, items) with end exclusive
    """
    if batch_size < 1:
        raise ValueError(f"Batch size must be positive, got {batch_size}")
    if offset < 0:
        raise ValueError(f"Offset cannot be negative, got {offset}")

    start = offset if offset < len(universe) else 0
    end = min(start + batch_size, len(universe))
    return start, end, list(universe[start:end])


async def run_batch(universe: Sequence[str], state: OffsetState, generator: WordGenerator,
                    output_dir: Union[str, Path],
                    batch_size: int = 4) -> Tuple[BatchResult, OffsetState]:
    """
    Process one batch and return it with the state for the next run.

    The returned state is not persisted here; the caller saves it.
    """
    if not universe:
        logger.warning("Emoji universe is empty, nothing to generate")
        return BatchResult(start=0, end=0), OffsetState(current_offset=0)

    if state.current_offset >= len(universe):
        logger.info(f"Offset {state.current_offset} is past the end of the universe, wrapping to 0")

    start, end, items = slice_batch(universe, state.current_offset, batch_size)
    logger.info(f"Processing emoji {start + 1} to {end} of {len(universe)}")
    logger.info(f"Emoji in this batch: {' '.join(items)}")

    generated = await generator.generate_batch(items)

    words = {}
    for emoji, word_list in generated.items():
        if is_word_list(word_list):
            words[emoji] = word_list
        else:
            logger.warning(f"Dropping {emoji}: invalid word list")

    batch = BatchResult(start=start, end=end, words=words)
    path = batch.save(output_dir)
    logger.info(f"Saved results to {path}")

    return batch, OffsetState(current_offset=end)


def generate_next_batch(universe: Sequence[str], store: OffsetStore, generator: WordGenerator,
                        output_dir: Union[str, Path], batch_size: int = 4,
                        cli_offset=None) -> BatchResult:
    """Load state, run one batch, persist the advanced offset."""
    state = store.load(cli_offset)
    logger.info(f"Starting from offset: {state.current_offset}")

    if universe and state.current_offset >= len(universe):
        logger.info("All emoji have been processed. Resetting offset to 0.")
        state = store.save(0)

    batch, next_state = asyncio.run(run_batch(universe, state, generator, output_dir, batch_size))
    store.save(next_state.current_offset)
    logger.info(f"Updated state file with new offset: {next_state.current_offset}")
    return batch
