from .normalize import normalize_text, normalize_multiline_text, normalize_key, strip_html_to_text
from .sanitize import sanitize_html
from .date_parse import parse_board_date, find_date_token
from .dedupe import deduplicate_by_uid
from .pool import map_with_concurrency
from .steplog import StepLogger, NullStepLogger, LoggingStepLogger, resolve_step_logger

__all__ = [
    "normalize_text",
    "normalize_multiline_text",
    "normalize_key",
    "strip_html_to_text",
    "sanitize_html",
    "parse_board_date",
    "find_date_token",
    "deduplicate_by_uid",
    "map_with_concurrency",
    "StepLogger",
    "NullStepLogger",
    "LoggingStepLogger",
    "resolve_step_logger",
]
