# pyright: reportExplicitAny=false
from typing import Annotated, Any

from fastapi import APIRouter, Query

from jsoncms.server._deps import StoreDep
from jsoncms.server._schemas import FileResponse, WriteFileRequest, WriteFileResponse

router = APIRouter(prefix="", tags=["content"])


@router.get("/file")
def read_file(
    path: Annotated[str, Query(min_length=1)], store: StoreDep
) -> FileResponse:
    """Read a content file, falling back to the remote when it is not local."""
    return FileResponse(content=store.read(path))


@router.post("/file")
def write_file(body: WriteFileRequest, store: StoreDep) -> WriteFileResponse:
    """Validate and write a content file."""
    result = store.write(body.path, body.content)
    return WriteFileResponse(content=result.content, remote_synced=result.remote_synced)


@router.get("/files")
def list_files(store: StoreDep) -> list[dict[str, Any]]:
    """List the JSON file tree."""
    return [node.to_dict() for node in store.list_tree()]
