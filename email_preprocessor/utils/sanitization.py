"""
Sanitization Utility Module
Makes untrusted email values safe to put in a log line.
"""

import re
import unicodedata

# ANSI escape sequences (terminal colors, cursor movement)
_ANSI_ESCAPE = re.compile(r'\x1B(?:[@-Z\\-_]|\[[0-?]*[ -/]*[@-~])')


def sanitize_for_logging(text: str, max_length: int = 255) -> str:
    """
    Sanitize a header value, id or subject before logging it.

    Subjects and senders come straight from the sender's mail client, so a
    raw CRLF could forge extra log entries and an escape sequence could
    rewrite the operator's terminal.

    Args:
        text: The input string to sanitize.
        max_length: Maximum allowed length for the log entry (truncates if longer).

    Returns:
        Sanitized string safe for logging.
    """
    if not text:
        return ""

    text = unicodedata.normalize('NFKC', text)
    text = text.replace('\n', '\\n').replace('\r', '\\r')
    text = _ANSI_ESCAPE.sub('', text)

    # Drop remaining control characters, tab excepted
    text = "".join(ch for ch in text if ch == '\t' or ord(ch) >= 32)

    if len(text) > max_length:
        text = text[:max_length] + "..."

    return text
