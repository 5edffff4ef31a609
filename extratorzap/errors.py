"""
Error types shared by the search session, lookup client and web layer.
Every one of them ends up as a single human-readable message in the UI.
"""


class ExtratorZapError(Exception):
    """Base class for all application errors"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ExtratorZapError):
    """A required form field is empty"""


class BusinessLookupError(ExtratorZapError):
    """The business lookup failed (transport, format, parse or shape)"""


class ConfigurationError(ExtratorZapError):
    """Required configuration (the Gemini API key) is missing"""


class NothingToExport(ExtratorZapError):
    """Export was requested while the result list is empty"""
