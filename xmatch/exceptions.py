"""Custom exceptions for xmatch."""


class XmatchError(Exception):
    """Base exception for xmatch errors."""
    pass


class XmlSourceError(XmatchError):
    """Raised when the XML for one side of a comparison cannot be obtained."""
    def __init__(self, message: str, source: str = None):
        super().__init__(message)
        self.message = message
        self.source = source


class XmlParseError(XmlSourceError):
    """Raised when engine input is not well-formed XML."""
    def __init__(self, message: str, line: int = None, column: int = None):
        super().__init__(message)
        self.line = line
        self.column = column


class MarshallingError(XmlSourceError):
    """Raised when an object cannot be mapped to XML."""
    def __init__(self, type_name: str, reason: str):
        super().__init__(
            f"Error occurred during marshalling of {type_name} object for matching: {reason}"
        )
        self.type_name = type_name
        self.reason = reason


class EngineContextError(XmatchError):
    """Raised when the engine configuration context is misused."""
    pass


class ConfigError(XmatchError):
    """Raised when a settings profile file is invalid."""
    def __init__(self, message: str, path: str = None):
        super().__init__(message)
        self.message = message
        self.path = path
