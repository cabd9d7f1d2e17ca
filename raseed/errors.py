"""
Error taxonomy shared by the adapters and pipelines.

Every pipeline failure is a PipelineError. The worker wrapper uses
`retryable` to decide between raising back to the transport (redelivery)
and acknowledging the message after logging it.
"""


class PipelineError(Exception):
    """Base class for classified pipeline failures."""

    code = "PIPELINE_ERROR"
    retryable = False

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class TransientIO(PipelineError):
    """Store, bus or model unavailable (including timeouts). Retried by the transport."""

    code = "TRANSIENT_IO"
    retryable = True


class MalformedModelOutput(PipelineError):
    """Model text could not be parsed into the expected schema."""

    code = "MALFORMED_MODEL_OUTPUT"

    def __init__(self, message: str, raw_text: str):
        super().__init__(message)
        self.raw_text = raw_text


class NotFound(PipelineError):
    """A referenced record does not exist."""

    code = "NOT_FOUND"

    def __init__(self, collection: str, record_id: str):
        super().__init__(f"{collection}/{record_id} was not found")
        self.collection = collection
        self.record_id = record_id


class ValidationError(PipelineError):
    """Unsupported action, service tag or payload shape."""

    code = "VALIDATION_ERROR"
