"""
Gmail Decoder Module
Decodes Gmail API message resources into canonical EmailRecord objects

A Gmail message carries its headers as a list of {name, value} pairs and its
content as a tree of parts. Multipart containers expose a ``parts`` list,
leaves expose ``mimeType`` and ``body``. Leaf bodies either reference an
attachment by ``attachmentId`` or inline the content as URL-safe base64 in
``data``.
"""

import base64
import logging
from typing import Any, Dict, List, Mapping, Optional

from .email_record import AttachmentDescriptor, EmailBody, EmailRecord
from .errors import DecodeError
from ..utils.sanitization import sanitize_for_logging


logger = logging.getLogger(__name__)


def decode_email(message: Mapping[str, Any]) -> EmailRecord:
    """
    Decode a Gmail API message into an EmailRecord

    Args:
        message: Message resource as returned by users.messages.get
            (format=full), already deserialized from JSON

    Returns:
        A freshly built EmailRecord

    Raises:
        DecodeError: If anything in the message cannot be read. Decoding is
            all-or-nothing, no partial record is returned.
    """
    try:
        record = EmailRecord(
            id=message.get("id"),
            thread_id=message.get("threadId"),
            label_ids=list(message.get("labelIds") or []),
            headers={},
            sender="",
            subject="",
            body=EmailBody(),
            attachments=[],
        )
        payload = message["payload"]

        _decode_headers(payload.get("headers"), record)

        parts = payload.get("parts")
        if parts is not None:
            decode_parts(parts, record)
        else:
            # Single-part message, the payload is the only leaf
            decode_body(payload, record)

        logger.debug(
            "Decoded Gmail message %s: %d attachment(s)",
            sanitize_for_logging(str(record.id)),
            len(record.attachments),
        )
        return record
    except Exception as e:
        raise DecodeError(f"Failed to decode email: {e}") from e


def _decode_headers(headers: Optional[List[Dict[str, str]]], record: EmailRecord) -> None:
    """Store headers under lowercased names and pick out From and Subject"""
    if not headers:
        return

    for header in headers:
        name = header["name"].lower()
        value = header.get("value", "")
        record.headers[name] = value

        if name == "from":
            record.sender = value
        elif name == "subject":
            record.subject = value


def decode_parts(parts: List[Dict[str, Any]], record: EmailRecord) -> None:
    """
    Walk a part tree depth-first, pre-order, decoding every leaf

    Nested parts are visited before the next sibling. An explicit stack is
    used instead of recursion so hostile nesting depth cannot exhaust the
    interpreter stack.

    Args:
        parts: Sibling parts in document order
        record: Record that leaf content is accumulated into
    """
    # Reversed so the first sibling is popped first
    stack = list(reversed(parts))
    while stack:
        part = stack.pop()
        children = part.get("parts")
        if children is not None:
            stack.extend(reversed(children))
        else:
            decode_body(part, record)


def decode_body(part: Mapping[str, Any], record: EmailRecord) -> None:
    """
    Decode a single leaf part into the record

    Attachment references win over inline data. Inline data is appended to
    the plain or HTML body by MIME type; any other type is ignored.
    """
    body = part.get("body")
    if body is None:
        return

    mime_type = part.get("mimeType") or ""

    if body.get("attachmentId"):
        record.attachments.append(AttachmentDescriptor(
            id=body["attachmentId"],
            filename=part.get("filename") or "",
            mime_type=mime_type,
            size=body.get("size") or 0,
        ))
    elif body.get("data"):
        content = decode_base64url(body["data"])
        if mime_type == "text/plain":
            record.body.plain += content
        elif mime_type == "text/html":
            record.body.html += content


def decode_base64url(data: str) -> str:
    """
    Decode Gmail's URL-safe base64 into text

    Gmail strips the trailing padding, so it is restored before decoding.
    """
    normalized = data.replace("-", "+").replace("_", "/")
    normalized += "=" * (-len(normalized) % 4)
    return base64.b64decode(normalized).decode("utf-8", errors="replace")


class GmailPreprocessor:
    """
    Preprocessor for responses from the Gmail API client

    The client wraps the message resource in a response envelope whose
    ``data`` attribute holds the message itself. The default decoder table
    maps the gmail source to decode_email, which expects the bare message;
    callers holding raw client responses register this class's process
    in its place, e.g. ``preprocess("gmail", response,
    {SourceType.GMAIL: GmailPreprocessor().process})``.
    """

    def process(self, response: Mapping[str, Any]) -> EmailRecord:
        try:
            return decode_email(response["data"])
        except Exception as e:
            raise DecodeError(f"Failed to process email: {e}") from e
