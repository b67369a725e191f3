"""Request payload models for the webhook endpoint."""

from enum import Enum

from pydantic import BaseModel, Field, field_validator

from readmesync.services.site_service import is_safe_name


class EventKind(str, Enum):
    """Values accepted in the ``X-Github-Event`` header."""

    PING = "ping"
    PUSH = "push"
    SYNC_ALL = "sync-all"


class Repository(BaseModel):
    name: str = ""
    url: str = ""

    @field_validator("name")
    @classmethod
    def _single_path_segment(cls, value: str) -> str:
        # The name becomes a file name under the content directory.
        if value and not is_safe_name(value):
            raise ValueError("repository name must be a single path segment")
        return value


class SyncRequest(BaseModel):
    """Body of a push or sync-all request.

    Push events use ``ref`` and ``repository``; sync-all requests use
    ``repos``.  Which one applies is decided by the event header, not by
    which fields happen to be present.
    """

    ref: str = ""
    repository: Repository = Field(default_factory=Repository)
    repos: list[str] = Field(default_factory=list)
