"""Request and response models for the HTTP API."""

from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field


class _CamelModel(BaseModel):
    model_config: ClassVar[ConfigDict] = ConfigDict(populate_by_name=True)


class HealthResponse(BaseModel):
    status: str


class ErrorResponse(BaseModel):
    """Body of every error response.

    Attributes:
        error: Human-readable message.
        code: Error kind, e.g. ``schema_violation``.
        details: Kind-specific context such as validation issues or
            credential remediation text.
    """

    error: str
    code: str
    details: Any = None


# =============================================================================
# Content
# =============================================================================


class FileResponse(BaseModel):
    content: str


class WriteFileRequest(BaseModel):
    path: str = Field(min_length=1)
    content: str


class WriteFileResponse(_CamelModel):
    content: str
    remote_synced: bool = Field(default=False, alias="remoteSynced")


# =============================================================================
# Git
# =============================================================================


class CommitRequest(BaseModel):
    message: str


class CommitResponse(_CamelModel):
    commit_id: str = Field(alias="commitId")
    paths: list[str] = Field(default_factory=list)


class RemoteRequest(BaseModel):
    """Push or pull target; omitted fields fall back to the ``[git]`` settings."""

    remote: str | None = Field(default=None, min_length=1)
    branch: str | None = Field(default=None, min_length=1)


class RevertRequest(BaseModel):
    path: str = Field(min_length=1)
    ref: str | None = None


class SuccessResponse(BaseModel):
    success: bool = True


class StatusResponse(BaseModel):
    status: list[list[str | int]]


class HistoryResponse(BaseModel):
    history: list[dict[str, Any]]


class BranchResponse(BaseModel):
    branch: str
