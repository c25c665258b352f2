"""
Exception types raised by the heuristic auditor.

Fatal input and capture errors abort a run before any stage starts.
Model and schema errors are raised inside a single stage call and are
handled there (retry, degrade, or drop the heuristic).
"""


class AuditorError(Exception):
    """Base class for all auditor errors."""

    error_type = "auditor_error"

    def to_dict(self) -> dict:
        """Structured form returned to callers instead of a partial result."""
        return {"type": self.error_type, "message": str(self)}


class InvalidInputError(AuditorError):
    """The captured page or the request is unusable."""

    error_type = "invalid_input"


class InvalidScreenshotError(InvalidInputError):
    """Screenshot payload is missing, too small, or only a remote reference."""

    error_type = "invalid_screenshot"


class UnknownHeuristicError(InvalidInputError):
    """A heuristic name or id does not match the fixed catalogue."""

    error_type = "unknown_heuristic"


class CaptureError(AuditorError):
    """The page capture collaborator could not produce a page."""

    error_type = "capture_failed"


class ModelCallError(AuditorError):
    """A model endpoint call failed in transport or returned non-JSON content."""

    error_type = "model_call_failed"


class SchemaValidationError(AuditorError):
    """A model response did not match the expected schema."""

    error_type = "schema_validation_failed"


class PipelineTimeoutError(AuditorError):
    """The caller's deadline for the whole pipeline expired."""

    error_type = "pipeline_timeout"
