"""
Email Record Model
Contains the canonical, source-independent representation of an email

Every decoder (Gmail API, EML, Outlook) produces an EmailRecord and the
feature extractor consumes nothing else. Field names on the Python side are
snake_case; to_dict() renders the camelCase shape downstream consumers
depend on.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class AttachmentDescriptor:
    """Metadata for one attachment; the content itself is never loaded"""
    id: str = ""
    filename: str = ""
    mime_type: str = ""
    size: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "filename": self.filename,
            "mimeType": self.mime_type,
            "size": self.size,
        }


@dataclass
class EmailBody:
    """Plain text and HTML bodies, each accumulated across all matching parts"""
    plain: str = ""
    html: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {"plain": self.plain, "html": self.html}


@dataclass
class EmailRecord:
    """
    Canonical email record

    Attributes:
        id: Source identifier (synthesized by the EML adapter)
        thread_id: Conversation identifier, None unless the source has one
        label_ids: Source labels, never None
        headers: Header name to value. The Gmail decoder lowercases names,
            the EML adapter keeps the original case.
        sender: Raw From header value, not split into name and address
        subject: Subject line
        body: Plain text and HTML bodies
        attachments: Attachment descriptors in traversal order
    """
    id: Optional[str] = None
    thread_id: Optional[str] = None
    label_ids: List[str] = field(default_factory=list)
    headers: Dict[str, str] = field(default_factory=dict)
    sender: str = ""
    subject: str = ""
    body: EmailBody = field(default_factory=EmailBody)
    attachments: List[AttachmentDescriptor] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Render the record with the wire field names"""
        return {
            "id": self.id,
            "threadId": self.thread_id,
            "labelIds": list(self.label_ids),
            "headers": dict(self.headers),
            "sender": self.sender,
            "subject": self.subject,
            "body": self.body.to_dict(),
            "attachments": [a.to_dict() for a in self.attachments],
        }
