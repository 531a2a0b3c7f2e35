"""Custom Exceptions for the whispersub application."""

class WhisperSubError(Exception):
    """Base class for exceptions in this package."""
    pass

class ArgumentError(WhisperSubError):
    """Exception raised for a missing or invalid command argument."""
    pass

class ConfigurationError(WhisperSubError):
    """Exception raised for errors in configuration loading."""
    pass

class MediaToolError(WhisperSubError):
    """Exception raised when ffmpeg/ffprobe fails to probe, extract or split media."""
    pass

class ProviderError(WhisperSubError):
    """Exception raised when a call to the speech/translation provider fails."""
    pass

class TranscriptionError(ProviderError):
    """Exception raised for errors during transcription."""
    pass

class TranslationError(ProviderError):
    """Exception raised for errors during translation."""
    pass

class FormatError(WhisperSubError):
    """Exception raised for malformed subtitle text."""
    pass

class FileSystemError(WhisperSubError):
    """Exception raised for file system related errors (permissions, not found etc)."""
    pass
