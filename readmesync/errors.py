"""Domain exception hierarchy for readmesync.

Handlers and services raise these so that the global exception handler
in ``readmesync.middleware.exception_handler`` can map them to the right
HTTP status code.  The message is for the log only: clients never see
more than the status reason phrase.
"""


class SyncError(Exception):
    """Base for all domain exceptions."""

    def __init__(self, message: str = "An unexpected error occurred", *, status_code: int = 500):
        super().__init__(message)
        self.status_code = status_code


class BadRequestError(SyncError):
    """Malformed method, header, body or ref (400)."""

    def __init__(self, message: str = "Bad request"):
        super().__init__(message, status_code=400)


class AuthError(SyncError):
    """Webhook signature did not match (400, as GitHub expects)."""

    def __init__(self, message: str = "Invalid webhook signature"):
        super().__init__(message, status_code=400)


class SignatureError(SyncError):
    """The expected digest could not be computed (500)."""

    def __init__(self, message: str = "Signature computation failed"):
        super().__init__(message, status_code=500)


class UpstreamFetchError(SyncError):
    """A README could not be fetched from GitHub (500 on the push path)."""

    def __init__(self, repo: str, message: str, *, status: str = "", body: bytes = b""):
        super().__init__(message, status_code=500)
        self.repo = repo
        self.status = status
        self.body = body


class FetchStatusError(UpstreamFetchError):
    """GitHub answered with a non-success status.

    ``body`` keeps whatever the API sent back so it can be logged.
    """

    def __init__(self, repo: str, status: str, body: bytes = b""):
        super().__init__(repo, f"{repo}: non-200 status: {status}", status=status, body=body)


class FetchTransportError(UpstreamFetchError):
    """The request failed below HTTP (connect, timeout, bad response)."""

    def __init__(self, repo: str, reason: str):
        super().__init__(repo, f"{repo}: request failed: {reason}")


class LocalIOError(SyncError):
    """A content file could not be written (500)."""

    def __init__(self, message: str = "Could not write content file"):
        super().__init__(message, status_code=500)


class GeneratorError(SyncError):
    """The site generator failed, timed out or could not be launched (500)."""

    def __init__(self, message: str = "Site generator failed", *, output: str = ""):
        super().__init__(message, status_code=500)
        self.output = output


class ConfigError(Exception):
    """Required configuration is missing at startup."""

    def __init__(self, message: str, *, missing: list[str] | None = None):
        super().__init__(message)
        self.missing = missing or []


def format_error_response(*, error: str, request_id: str = "") -> dict:
    """Build a structured error response dict.

    Parameters
    ----------
    error : str
        Short error title, the HTTP reason phrase (e.g. ``"Bad Request"``).
    request_id : str
        The request ID for tracing against the server log.

    Returns
    -------
    dict
        ``{"error": ..., "request_id": ...}``
    """
    return {
        "error": error,
        "request_id": request_id,
    }
