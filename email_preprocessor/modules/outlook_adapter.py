"""
Outlook Adapter Module
Partial mapping of Microsoft Graph message resources to EmailRecord

Only the fields below are mapped. Labels and headers are not fetched, and
attachments are not enumerated: a message with attachments gets a single
placeholder descriptor whose id is UNLISTED_ATTACHMENTS_ID, meaning a
separate listAttachments call is needed to resolve them.
"""

from typing import Any, Mapping

from .email_record import AttachmentDescriptor, EmailBody, EmailRecord


UNLISTED_ATTACHMENTS_ID = "listAttachments"


class OutlookPreprocessor:
    """Preprocessor for Graph API message resources"""

    def process(self, message: Mapping[str, Any]) -> EmailRecord:
        # "from" rather than "sender": sender can be a delegate or a mailer daemon
        address = message["from"]["emailAddress"]
        content = message["body"]["content"]

        if message["body"].get("contentType") == "text":
            body = EmailBody(plain=content)
        else:
            body = EmailBody(html=content)

        attachments = []
        if message.get("hasAttachments"):
            attachments.append(AttachmentDescriptor(id=UNLISTED_ATTACHMENTS_ID))

        return EmailRecord(
            id=message.get("id"),
            thread_id=message.get("conversationId"),
            label_ids=[],
            headers={},
            sender=f"{address.get('name') or ''} <{address.get('address') or ''}>".lstrip(),
            subject=message.get("subject") or "",
            body=body,
            attachments=attachments,
        )
