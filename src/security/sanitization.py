"""
Credential sanitization for logs, error messages, and HTTP responses.

Provides global logging filter to redact .env secrets and Supabase key
patterns from log output, exception messages, and stack traces.
"""
import logging
import os
import re
from pathlib import Path
from dotenv import dotenv_values

ENV_FILE = Path(__file__).parent.parent.parent / ".env"

# .env entries whose values are redacted (settings like STORE_BACKEND are not)
SECRET_MARKERS = ("KEY", "SECRET", "TOKEN", "PASSWORD")

# Supabase service-role / anon keys are JWTs; newer projects use sb_secret_ keys
KEY_PATTERNS = [
    r'eyJ[A-Za-z0-9_-]{10,}\.[A-Za-z0-9_-]{10,}\.[A-Za-z0-9_-]{10,}',
    r'sb_secret_[A-Za-z0-9_-]{16,}',
    r'sb_publishable_[A-Za-z0-9_-]{16,}',
]


def _build_patterns(env_file: Path = ENV_FILE) -> list[tuple[re.Pattern, str]]:
    """Compile redaction patterns from .env values plus known key formats."""
    patterns = []

    if env_file.exists():
        for key, value in dotenv_values(env_file).items():
            if value and any(marker in key.upper() for marker in SECRET_MARKERS):
                patterns.append((re.compile(re.escape(value)), "[REDACTED]"))

    # Key supplied through the process environment rather than .env
    service_key = os.getenv("SUPABASE_SERVICE_ROLE_KEY")
    if service_key:
        patterns.append((re.compile(re.escape(service_key)), "[REDACTED]"))

    for raw in KEY_PATTERNS:
        patterns.append((re.compile(raw), "[REDACTED]"))

    return patterns


class SensitiveDataFilter(logging.Filter):
    """
    Logging filter that redacts sensitive data from all log records.

    Loads secret values from .env file and creates regex patterns to redact them.
    Also includes hardcoded patterns for Supabase key formats.
    """

    def __init__(self):
        super().__init__()
        self.patterns = _build_patterns()

    def filter(self, record: logging.LogRecord) -> bool:
        """
        Sanitize log record by removing sensitive data.

        Args:
            record: Log record to sanitize

        Returns:
            True (always allows record through after sanitization)
        """
        if isinstance(record.msg, str):
            for pattern, replacement in self.patterns:
                record.msg = pattern.sub(replacement, record.msg)

        if record.args and isinstance(record.args, tuple):
            sanitized_args = []
            for arg in record.args:
                if isinstance(arg, str):
                    for pattern, replacement in self.patterns:
                        arg = pattern.sub(replacement, arg)
                sanitized_args.append(arg)
            record.args = tuple(sanitized_args)

        if record.exc_text:
            for pattern, replacement in self.patterns:
                record.exc_text = pattern.sub(replacement, record.exc_text)

        return True


def sanitize_text(text: str) -> str:
    """
    Sanitize arbitrary text by removing sensitive data.

    Use this for HTTP error responses or any output that might contain
    secrets (store URLs with keys, echoed headers).

    Args:
        text: Text to sanitize

    Returns:
        Sanitized text with secrets replaced by [REDACTED]
    """
    if not isinstance(text, str):
        text = str(text)

    for pattern, replacement in _build_patterns():
        text = pattern.sub(replacement, text)

    return text


def install_log_sanitization():
    """
    Install global log sanitization filter.

    Call this once during application initialization to ensure all log output
    (including from third-party libraries) has sensitive data redacted.
    """
    sensitive_filter = SensitiveDataFilter()
    root_logger = logging.getLogger()
    root_logger.addFilter(sensitive_filter)
    for handler in root_logger.handlers:
        handler.addFilter(sensitive_filter)

    # httpx logs full request URLs at INFO
    for logger_name in ("httpx", "httpcore"):
        logging.getLogger(logger_name).setLevel(logging.WARNING)
