"""Error taxonomy shared by services and routers.

Each error carries the HTTP status it maps to; ``main.py`` turns them into
JSON responses.
"""


class EducelError(Exception):
    status_code = 500
    public_message = "Internal server error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.public_message)
        self.message = message or self.public_message

    def payload(self) -> dict:
        return {"error": self.message}


class InvalidRequestError(EducelError):
    status_code = 400
    public_message = "Invalid request data"


class UnknownGenerationTypeError(InvalidRequestError):
    def __init__(self, gen_type: str):
        super().__init__(f"Unknown generation type: {gen_type}")
        self.gen_type = gen_type


class UnauthenticatedError(EducelError):
    status_code = 401
    public_message = "Unauthorized"


class NotFoundError(EducelError):
    status_code = 404
    public_message = "Not found"


class AlreadySavedError(EducelError):
    status_code = 409
    public_message = "Already saved"


class RateLimitExceededError(EducelError):
    status_code = 429
    public_message = "Rate limit reached. Please wait a moment and try again."

    def __init__(self, limit: int, remaining: int, reset_at: float):
        super().__init__()
        self.limit = limit
        self.remaining = remaining
        self.reset_at = reset_at

    def payload(self) -> dict:
        return {
            "error": self.message,
            "rateLimited": True,
            "limit": self.limit,
            "remaining": self.remaining,
            "resetAt": int(self.reset_at * 1000),
        }


class GenerationFailedError(EducelError):
    """Retries exhausted. ``cause`` is for logs only, never for the caller."""

    status_code = 502
    public_message = "Generation failed. Please try again."

    def __init__(self, cause: BaseException | None = None, attempts: int = 0):
        super().__init__()
        self.cause = cause
        self.attempts = attempts


class ServiceUnavailableError(EducelError):
    status_code = 503
    public_message = "Content generation is not configured"


class GenerationTimeoutError(EducelError):
    status_code = 504
    public_message = "Generation timed out. Please try again later."


class StorageTimeoutError(EducelError):
    status_code = 504
    public_message = "Database request timed out"


# ── Orchestrator-internal attempt errors ─────────────────────────────────────

class AttemptError(Exception):
    """A single generation attempt failed; retryable by default."""


class MissingTextBlockError(AttemptError):
    pass


class SchemaValidationError(AttemptError):
    pass


class FatalGenerationError(ServiceUnavailableError):
    """Raised from inside an attempt when retrying cannot help."""


class MissingCredentialsError(FatalGenerationError):
    public_message = "Generation credentials are missing"
