"""Exception hierarchy shared by the pipeline, the persistence adapter and the routes."""


class SitecraftError(Exception):
    """Base class for every error raised by this service."""


class ModelError(SitecraftError):
    """Failure talking to the generative model API."""


class ModelTransportError(ModelError):
    """Transient failure (rate limit, 5xx, overload, timeout, network). Retried."""


class ModelFatalError(ModelError):
    """Non-transient failure reported by the model API. Never retried."""


class ModelRetryExhaustedError(ModelFatalError):
    """All retry attempts for a transient failure were used up."""


class StageValidationError(SitecraftError):
    """A stage's JSON output could not be parsed or failed schema validation."""


class DomainError(SitecraftError):
    """Missing prerequisite state. Carries the HTTP status the routes should use."""
    status_code: int = 400

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        if status_code is not None:
            self.status_code = status_code


class ProjectNotFoundError(DomainError):
    status_code = 404

    def __init__(self, project_id: str):
        super().__init__(f"Project not found: {project_id}")


class NoCompletedVersionError(DomainError):
    status_code = 400

    def __init__(self):
        super().__init__("No existing website to edit. Generate one first.")


class NoFilesError(DomainError):
    status_code = 400

    def __init__(self):
        super().__init__("No files found in the latest version.")


class InsufficientCreditsError(DomainError):
    status_code = 402

    def __init__(self):
        super().__init__("No generation credits remaining")
