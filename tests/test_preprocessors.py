"""
Tests for source-type dispatch
"""

import base64
import unittest

from email_preprocessor.modules.email_record import EmailRecord
from email_preprocessor.modules.errors import DecodeError, ProcessError
from email_preprocessor.modules.gmail_decoder import GmailPreprocessor
from email_preprocessor.modules.preprocessors import SourceType, build_decoders, preprocess


GMAIL_MESSAGE = {
    "id": "g1",
    "threadId": "t1",
    "labelIds": ["INBOX"],
    "payload": {
        "headers": [{"name": "Subject", "value": "From Gmail"}],
        "mimeType": "text/plain",
        "body": {"data": base64.urlsafe_b64encode(b"hello").decode("ascii")},
    },
}

OUTLOOK_MESSAGE = {
    "id": "o1",
    "conversationId": "c1",
    "subject": "From Outlook",
    "from": {"emailAddress": {"name": "A", "address": "a@example.com"}},
    "body": {"contentType": "text", "content": "hello"},
    "hasAttachments": False,
}


class TestPreprocessDispatch(unittest.IsolatedAsyncioTestCase):

    async def test_gmail_source(self):
        record = await preprocess(SourceType.GMAIL, GMAIL_MESSAGE)

        self.assertEqual(record.subject, "From Gmail")
        self.assertEqual(record.body.plain, "hello")

    async def test_eml_source(self):
        record = await preprocess("eml", "Subject: From EML\n\nhello")

        self.assertEqual(record.subject, "From EML")
        self.assertEqual(record.body.plain, "hello")

    async def test_outlook_source(self):
        record = await preprocess("outlook", OUTLOOK_MESSAGE)

        self.assertEqual(record.subject, "From Outlook")
        self.assertEqual(record.thread_id, "c1")

    async def test_unknown_source(self):
        with self.assertRaises(ValueError) as ctx:
            await preprocess("pop3", "whatever")

        self.assertIn("pop3", str(ctx.exception))

    async def test_decoder_errors_propagate(self):
        with self.assertRaises(DecodeError):
            await preprocess("gmail", {"id": "x", "payload": None})

        with self.assertRaises(ProcessError):
            await preprocess("eml", 42)

    async def test_custom_decoder_table(self):
        calls = []

        def fake_decoder(raw):
            calls.append(raw)
            return EmailRecord(id="fake")

        record = await preprocess("gmail", {"any": "thing"}, {SourceType.GMAIL: fake_decoder})

        self.assertEqual(record.id, "fake")
        self.assertEqual(calls, [{"any": "thing"}])

    async def test_client_envelope_decoder(self):
        decoders = {SourceType.GMAIL: GmailPreprocessor().process}

        record = await preprocess("gmail", {"data": GMAIL_MESSAGE}, decoders)

        self.assertEqual(record.id, "g1")
        self.assertEqual(record.body.plain, "hello")

    async def test_missing_table_entry(self):
        with self.assertRaises(ValueError):
            await preprocess("outlook", OUTLOOK_MESSAGE, {SourceType.GMAIL: lambda raw: None})


class TestBuildDecoders(unittest.TestCase):

    def test_every_source_has_a_decoder(self):
        decoders = build_decoders()

        self.assertEqual(set(decoders), set(SourceType))


if __name__ == "__main__":
    unittest.main()
