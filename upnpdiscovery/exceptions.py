from __future__ import annotations


class ParseError(ValueError):
    """A structured value (device type, UDN) could not be parsed."""


class InvalidDataError(ValueError):
    """A description document does not have the expected structure."""
