"""Custom Exceptions for the embedsub application."""

class EmbedSubError(Exception):
    """Base class for exceptions in this module."""
    pass

class ConfigurationError(EmbedSubError):
    """Exception raised for errors in configuration loading."""
    pass

class FileSystemError(EmbedSubError):
    """Exception raised for file system related errors (permissions, not found etc)."""
    pass

class ProbeError(EmbedSubError):
    """Exception raised when a video container cannot be read or parsed."""
    pass

class SubtitleExtractionError(EmbedSubError):
    """Base class for errors raised by a single extraction attempt."""
    pass

class ToolError(SubtitleExtractionError):
    """Exception raised when ffmpeg or mkvextract reports a failure."""

    def __init__(self, message: str, diagnostics: str = ""):
        super().__init__(message)
        self.diagnostics = diagnostics

class EmptyOutputError(SubtitleExtractionError):
    """Exception raised when a tool run leaves no output or an empty file."""
    pass

class TranslationError(EmbedSubError):
    """Exception raised for errors during translation."""
    pass

class TranslationServiceError(TranslationError):
    """Exception raised when the text-generation service call fails."""
    pass

class EmptyTranslationError(TranslationError):
    """Exception raised when the service returns an empty translation for a chunk."""
    pass

class IntegrityError(TranslationError):
    """Exception raised when the translated chunk count differs from the source."""
    pass

class LanguageDetectionError(TranslationError):
    """Exception raised when the subtitle language could not be classified."""
    pass
