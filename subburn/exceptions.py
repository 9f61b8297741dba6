"""Custom Exceptions for the SubBurn application."""

class SubBurnError(Exception):
    """Base class for exceptions in this module."""
    pass

class ConfigurationError(SubBurnError):
    """Exception raised for errors in configuration loading or validation."""
    pass

class AudioExtractionError(SubBurnError):
    """Exception raised for errors during audio extraction."""
    pass

class TranscriptionError(SubBurnError):
    """Exception raised for errors during transcription."""
    pass

class FormattingError(SubBurnError):
    """Exception raised for errors while writing or exporting subtitle files."""
    pass

class VideoRenderError(SubBurnError):
    """Exception raised when the encoder fails to burn subtitles into a video."""

    def __init__(self, message: str, stderr: str = ""):
        super().__init__(message)
        self.stderr = stderr

class FileSystemError(SubBurnError):
    """Exception raised for file system related errors (permissions, not found, size limits etc)."""
    pass
