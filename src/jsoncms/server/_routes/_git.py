# pyright: reportExplicitAny=false
from typing import Annotated

from fastapi import APIRouter, Body, Query

from jsoncms.config import Settings
from jsoncms.server._deps import RepositoryDep, SettingsDep
from jsoncms.server._schemas import (
    BranchResponse,
    CommitRequest,
    CommitResponse,
    HistoryResponse,
    RemoteRequest,
    RevertRequest,
    StatusResponse,
    SuccessResponse,
)

router = APIRouter(prefix="/git", tags=["git"])


def _target(body: RemoteRequest | None, settings: Settings) -> tuple[str, str]:
    body = body or RemoteRequest()
    return body.remote or settings.git.remote, body.branch or settings.git.branch


@router.post("/commit")
def commit(body: CommitRequest, repository: RepositoryDep) -> CommitResponse:
    """Stage every content change and commit it."""
    result = repository.commit(body.message)
    return CommitResponse(commit_id=result.sha, paths=sorted(result.paths))


@router.post("/push")
def push(
    repository: RepositoryDep,
    settings: SettingsDep,
    body: Annotated[RemoteRequest | None, Body()] = None,
) -> SuccessResponse:
    """Push the configured branch, or the one named in the body."""
    remote, branch = _target(body, settings)
    repository.push(remote, branch)
    return SuccessResponse()


@router.post("/pull")
def pull(
    repository: RepositoryDep,
    settings: SettingsDep,
    body: Annotated[RemoteRequest | None, Body()] = None,
) -> SuccessResponse:
    remote, branch = _target(body, settings)
    repository.pull(remote, branch)
    return SuccessResponse()


@router.get("/status")
def get_status(repository: RepositoryDep) -> StatusResponse:
    """Return ``[path, head, workdir, stage]`` rows for the content root."""
    return StatusResponse(status=[row.as_list() for row in repository.status_matrix()])


@router.get("/history")
def get_history(
    repository: RepositoryDep,
    path: Annotated[str, Query(min_length=1)],
    max_count: Annotated[int | None, Query(alias="maxCount", ge=1)] = None,
) -> HistoryResponse:
    records = repository.history(path, max_count)
    return HistoryResponse(history=[record.to_dict() for record in records])


@router.post("/revert")
def revert(body: RevertRequest, repository: RepositoryDep) -> SuccessResponse:
    """Restore one content file from a commit, HEAD by default."""
    repository.revert(body.path, body.ref)
    return SuccessResponse()


@router.get("/branch")
def get_branch(repository: RepositoryDep) -> BranchResponse:
    return BranchResponse(branch=repository.current_branch())
