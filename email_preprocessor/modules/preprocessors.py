"""
Preprocessor Dispatch
Maps a source type to the decoder that turns its raw messages into EmailRecords

Each source has exactly one decoding callable. Decoders never call one
another; adding a source means adding an entry to the table.
"""

import inspect
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional, Union

from .email_record import EmailRecord
from .eml_adapter import EMLPreprocessor
from .gmail_decoder import decode_email
from .outlook_adapter import OutlookPreprocessor


class SourceType(str, Enum):
    """Where a raw message came from"""
    GMAIL = "gmail"
    EML = "eml"
    OUTLOOK = "outlook"


Decoder = Callable[[Any], Union[EmailRecord, Awaitable[EmailRecord]]]


def build_decoders() -> Dict[SourceType, Decoder]:
    """Return a fresh source type to decoder table"""
    return {
        SourceType.GMAIL: decode_email,
        SourceType.EML: EMLPreprocessor().process,
        SourceType.OUTLOOK: OutlookPreprocessor().process,
    }


async def preprocess(
    source: Union[SourceType, str],
    raw: Any,
    decoders: Optional[Dict[SourceType, Decoder]] = None
) -> EmailRecord:
    """
    Decode a raw message from any supported source

    Args:
        source: Source type, as a SourceType or its string value
        raw: Gmail message mapping, EML text or Graph message mapping
        decoders: Optional table overriding build_decoders()

    Raises:
        ValueError: If the source type is not supported
        DecodeError, ProcessError: Propagated from the source's decoder
    """
    try:
        source_type = SourceType(source)
    except ValueError:
        raise ValueError(f"Unsupported email source: {source!r}") from None

    table = decoders if decoders is not None else build_decoders()
    decoder = table.get(source_type)
    if decoder is None:
        raise ValueError(f"No decoder registered for source: {source_type.value}")

    result = decoder(raw)
    if inspect.isawaitable(result):
        result = await result
    return result
