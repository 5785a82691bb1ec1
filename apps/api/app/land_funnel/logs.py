from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Callable, Dict, List


logger = logging.getLogger(__name__)

LogFunction = Callable[..., None]

LOG_LEVELS: Dict[str, int] = {
    "info": logging.INFO,
    "success": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


@dataclass(frozen=True)
class LogEntry:
    message: str
    type: str
    timestamp: str

    def as_dict(self) -> Dict[str, str]:
        return asdict(self)


def logger_log(message: str, level: str = "info") -> None:
    logger.log(LOG_LEVELS.get(level, logging.INFO), message)


class RunLog:
    """Progress log for one user action: keeps the entries and mirrors them to ``logging``."""

    def __init__(self) -> None:
        self.entries: List[LogEntry] = []

    def __call__(self, message: str, level: str = "info") -> None:
        if level not in LOG_LEVELS:
            level = "info"
        self.entries.append(
            LogEntry(message=message, type=level, timestamp=datetime.now(timezone.utc).isoformat())
        )
        logger_log(message, level)

    def errors(self) -> List[str]:
        return [entry.message for entry in self.entries if entry.type == "error"]

    def as_dicts(self) -> List[Dict[str, str]]:
        return [entry.as_dict() for entry in self.entries]
