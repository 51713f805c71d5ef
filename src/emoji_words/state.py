"""Persistent offset cursor for the batch word generator."""
import json
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional, Union

from emoji_words.utils import get_logger, read_json, safe_cast, write_json_atomic

logger = get_logger(__name__)


@dataclass(frozen=True)
class OffsetState:
    """Next unprocessed position in the emoji universe."""
    current_offset: int = 0
    last_updated: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {'currentOffset': self.current_offset, 'lastUpdated': self.last_updated}


def parse_offset(value: Any) -> Optional[int]:
    """Return value as a non-negative int, or None if it is not one."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value.lstrip('-').isdigit():
            return None
    offset = safe_cast(value, int, None)
    if offset is None or offset < 0:
        return None
    return offset


class OffsetStore:
    """
    Reads and writes the generator state file.

    Single writer only: there is no locking, so concurrent runs overwrite
    each other and the last save wins.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def load(self, cli_offset: Any = None) -> OffsetState:
        """
        Determine the starting offset.

        Args:
            cli_offset: value from the command line; used when it is a
                non-negative integer

        Returns:
            State from the command line, the state file, or offset 0
        """
        offset = parse_offset(cli_offset)
        if offset is not None:
            logger.info(f"Using offset {offset} from command line")
            return OffsetState(current_offset=offset)

        if cli_offset is not None:
            logger.warning(f"Ignoring invalid offset argument: {cli_offset!r}")

        if not self.path.exists():
            return OffsetState()

        try:
            data = read_json(self.path)
        except (OSError, json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.warning(f"Could not read state file {self.path}: {e}")
            return OffsetState()

        if not isinstance(data, dict):
            logger.warning(f"State file {self.path} does not contain an object, starting at 0")
            return OffsetState()

        offset = parse_offset(data.get('currentOffset'))
        if offset is None:
            logger.warning(f"State file {self.path} has no usable currentOffset, starting at 0")
            return OffsetState()

        return OffsetState(current_offset=offset, last_updated=data.get('lastUpdated'))

    def save(self, offset: int) -> OffsetState:
        """Persist offset with the current UTC time, replacing prior state."""
        if offset < 0:
            raise ValueError(f"Offset cannot be negative: {offset}")
        state = OffsetState(
            current_offset=offset,
            last_updated=datetime.now(timezone.utc).isoformat(),
        )
        write_json_atomic(self.path, state.to_dict())
        logger.debug(f"Saved offset {offset} to {self.path}")
        return state
