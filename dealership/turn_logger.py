import json
import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional

from .config import Config

MAX_LOG_SIZE_MB = 10
MAX_LOG_FILES = 5


class JsonFormatter(logging.Formatter):
    """Formats log records into a JSON string."""
    def format(self, record):
        log_object = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "message": record.getMessage(),
        }
        if hasattr(record, 'extra_data'):
            log_object.update(record.extra_data)
        return json.dumps(log_object)


def setup_logger(log_file: str = None) -> logging.Logger:
    """Sets up and returns the per-turn chat logger."""
    log_file = log_file or Config.TURN_LOG_FILE
    logger = logging.getLogger("dealership.turns")
    logger.setLevel(logging.INFO)
    logger.propagate = False  # keep turn records out of the main log

    if logger.hasHandlers():
        logger.handlers.clear()

    os.makedirs(os.path.dirname(log_file) or ".", exist_ok=True)
    handler = RotatingFileHandler(
        log_file,
        maxBytes=MAX_LOG_SIZE_MB * 1024 * 1024,
        backupCount=MAX_LOG_FILES,
        encoding="utf-8",
    )
    handler.setFormatter(JsonFormatter())
    logger.addHandler(handler)
    return logger


turn_logger = setup_logger()


def log_turn(request_id: str, speaker: str, switch_speaker: Optional[str], fallback: bool,
             user_input: str, ai_response: str):
    """
    Logs a structured record for each chat turn. Message bodies are only kept
    when TURN_LOG_BODIES is on.
    """
    extra_data = {
        "request_id": request_id,
        "speaker": speaker,
        "switch_speaker": switch_speaker,
        "fallback": fallback,
        "input_chars": len(user_input or ""),
        "response_chars": len(ai_response or ""),
    }
    if Config.TURN_LOG_BODIES:
        extra_data["user_input"] = user_input
        extra_data["ai_response"] = ai_response
    turn_logger.info("Chat turn processed", extra={'extra_data': extra_data})
