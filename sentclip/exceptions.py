"""Custom Exceptions for the SentClip application."""

class SentClipError(Exception):
    """Base class for exceptions in this module."""
    pass

class ConfigurationError(SentClipError):
    """Exception raised for errors in configuration loading."""
    pass

class InputError(SentClipError):
    """Exception raised when the source audio is missing, empty or unreadable."""
    pass

class TranscriptionError(SentClipError):
    """Exception raised for errors during transcription."""
    pass

class ExtractionError(SentClipError):
    """Exception raised when a sentence clip cannot be cut from the source audio."""
    pass

class FileSystemError(SentClipError):
    """Exception raised for file system related errors (permissions, not found etc)."""
    pass
