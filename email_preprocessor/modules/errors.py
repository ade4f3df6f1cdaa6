"""
Preprocessing Errors
Exception types raised by the source decoders
"""


class PreprocessingError(Exception):
    """Base class for failures while turning a raw message into an EmailRecord"""


class DecodeError(PreprocessingError):
    """Raised when a Gmail API message cannot be decoded"""


class ProcessError(PreprocessingError):
    """Raised when raw EML text cannot be parsed or reshaped"""
