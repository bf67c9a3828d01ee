"""
Custom exception classes for error categorization in the VoicePlan pipeline.
"""


class VoicePlanError(Exception):
    """Base exception for all VoicePlan errors."""

    def __init__(self, message: str, context: dict = None):
        """
        Initialize exception with message and optional context.

        Args:
            message: Error message
            context: Optional dictionary with additional error context
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}


class PermanentError(VoicePlanError):
    """
    Exception for errors that should not be retried.

    Nothing in the pipeline retries; this marks failures that a caller
    could not fix by re-issuing the same request either.
    """
    pass


# Pipeline error taxonomy

class TranscriptionError(VoicePlanError):
    """
    The transcription model returned no text.

    Fatal to the recording attempt it belongs to.
    """
    pass


class AudioFormatError(TranscriptionError):
    """The audio payload is not a valid base64 data URI."""
    pass


class GenerationError(VoicePlanError):
    """A generation step returned no output."""
    pass


class ExtractionError(VoicePlanError):
    """
    Task detail extraction returned no output.

    Non-fatal inside a plan update (the task is kept unenriched),
    fatal when the extractor is used on its own.
    """
    pass


class ValidationError(PermanentError):
    """Exception for model output that does not conform to its schema."""

    def __init__(self, message: str, validation_errors: list = None, context: dict = None):
        """
        Initialize validation error.

        Args:
            message: Error message
            validation_errors: List of specific validation errors
            context: Additional error context
        """
        super().__init__(message, context)
        self.validation_errors = validation_errors or []


class ConfigurationError(PermanentError):
    """Exception for configuration errors."""
    pass


class NotFoundError(VoicePlanError):
    """Exception for a stored document that does not exist."""
    pass
