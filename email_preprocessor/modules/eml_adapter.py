"""
EML Adapter Module
Reshapes raw EML text into canonical EmailRecord objects

Parsing is delegated to the standard library ``email`` package and runs in
the event loop's default executor, so ``process`` has exactly one suspension
point and resolves exactly once: with the record, or with a ProcessError.
"""

import asyncio
import email
import logging
import time
from email import policy
from email.message import Message
from email.utils import getaddresses
from typing import Dict, List, Optional, Tuple

from .email_record import AttachmentDescriptor, EmailBody, EmailRecord
from .errors import ProcessError
from ..utils.sanitization import sanitize_for_logging


logger = logging.getLogger(__name__)


def parse_eml(raw_eml: str) -> Message:
    """Parse raw RFC 5322 text into a message tree"""
    return email.message_from_string(raw_eml, policy=policy.default)


class EMLPreprocessor:
    """
    Preprocessor for raw EML text

    EML files carry no identifier, thread or labels. The record id is
    synthesized from wall-clock milliseconds and is NOT unique when two
    messages are processed within the same millisecond.
    """

    def __init__(self, parser=parse_eml):
        """
        Args:
            parser: Callable turning raw EML text into an email.message.Message
        """
        self.parser = parser

    async def process(self, raw_eml: str) -> EmailRecord:
        """
        Parse and reshape an EML document

        Raises:
            ProcessError: "Failed to process EML: ..." when the parser fails,
                "Failed to process EML structure: ..." when its output cannot
                be reshaped
        """
        loop = asyncio.get_running_loop()
        try:
            msg = await loop.run_in_executor(None, self.parser, raw_eml)
        except Exception as e:
            raise ProcessError(f"Failed to process EML: {e}") from e

        try:
            record = self._reshape(msg)
        except Exception as e:
            raise ProcessError(f"Failed to process EML structure: {e}") from e

        logger.debug(
            "Processed EML %s (subject=%s)",
            record.id,
            sanitize_for_logging(record.subject, max_length=80),
        )
        return record

    def _reshape(self, msg: Message) -> EmailRecord:
        plain, html, attachments = self._extract_content(msg)
        return EmailRecord(
            id=str(int(time.time() * 1000)),
            thread_id="",
            label_ids=[],
            headers=self._extract_headers(msg),
            sender=self._extract_sender_address(msg),
            subject=str(msg.get("Subject") or ""),
            body=EmailBody(plain=plain, html=html),
            attachments=attachments,
        )

    @staticmethod
    def _extract_headers(msg: Message) -> Dict[str, str]:
        """
        Collect headers keeping their original case

        Repeated headers (Received, DKIM-Signature, ...) keep the first
        occurrence, which is the topmost one in the file.
        """
        headers: Dict[str, str] = {}
        for key, value in msg.items():
            if key not in headers:
                headers[key] = str(value)
        return headers

    @staticmethod
    def _extract_sender_address(msg: Message) -> str:
        """Return the address part of the first From mailbox, or an empty string"""
        from_value = msg.get("From")
        if not from_value:
            return ""
        for _, address in getaddresses([str(from_value)]):
            if address:
                return address
        return ""

    def _extract_content(
        self,
        msg: Message
    ) -> Tuple[str, str, List[AttachmentDescriptor]]:
        """
        Walk the part tree depth-first collecting bodies and attachments

        Text parts are concatenated in walk order with no separator.
        Attached messages are recorded as a single attachment and never
        descended into, so a forwarded message's text stays out of the
        outer body.
        """
        plain_parts: List[str] = []
        html_parts: List[str] = []
        attachments: List[AttachmentDescriptor] = []

        stack = [msg]
        while stack:
            part = stack.pop()

            if self._is_attachment(part):
                attachments.append(self._describe_attachment(part))
            elif part.is_multipart():
                stack.extend(reversed(part.get_payload()))
            elif part.get_content_type() == "text/plain":
                plain_parts.append(self._decode_part_payload(part))
            else:
                html_parts.append(self._decode_part_payload(part))

        return "".join(plain_parts), "".join(html_parts), attachments

    @staticmethod
    def _is_attachment(part: Message) -> bool:
        """
        Anything that is not an unnamed inline text body is an attachment

        Non-text leaves count whether or not they declare a disposition.
        """
        if part.get_content_disposition() == "attachment":
            return True
        content_type = part.get_content_type()
        if content_type == "message/rfc822":
            return True
        if part.is_multipart():
            return False
        if content_type not in ("text/plain", "text/html"):
            return True
        return bool(part.get_filename())

    @staticmethod
    def _describe_attachment(part: Message) -> AttachmentDescriptor:
        if part.is_multipart():
            # Attached message: size of the enclosed message as serialized
            size = sum(len(p.as_bytes()) for p in part.get_payload())
        else:
            payload = part.get_payload(decode=True)
            size = len(payload) if payload else 0
        return AttachmentDescriptor(
            id=str(part.get("Content-ID") or ""),
            filename=part.get_filename() or "",
            mime_type=part.get_content_type() or "",
            size=size,
        )

    @classmethod
    def _decode_part_payload(cls, part: Message) -> str:
        payload = part.get_payload(decode=True)
        if not payload:
            return ""
        return cls._decode_bytes(payload, part.get_content_charset())

    @staticmethod
    def _decode_bytes(data: bytes, charset: Optional[str]) -> str:
        """Decode bytes with the declared charset, falling back to UTF-8"""
        encoding = charset or "utf-8"
        try:
            return data.decode(encoding, errors="replace")
        except LookupError:
            # Unknown charset
            return data.decode("utf-8", errors="replace")
