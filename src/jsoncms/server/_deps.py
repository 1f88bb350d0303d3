"""Request dependencies resolving the components stored on the app."""

from typing import Annotated, cast

from fastapi import Depends, Request

from jsoncms.config import Settings
from jsoncms.content import ContentStore
from jsoncms.exceptions import JsoncmsError
from jsoncms.repository import ContentRepository


def get_store(request: Request) -> ContentStore:
    return cast("ContentStore", request.app.state.store)


def get_repository(request: Request) -> ContentRepository:
    """Return the repository, or raise the error that prevented opening it."""
    repository = cast("ContentRepository | None", request.app.state.repository)
    if repository is None:
        raise cast("JsoncmsError", request.app.state.repository_error)
    return repository


StoreDep = Annotated[ContentStore, Depends(get_store)]
RepositoryDep = Annotated[ContentRepository, Depends(get_repository)]


def get_settings(request: Request) -> Settings:
    return cast("Settings", request.app.state.settings)


SettingsDep = Annotated[Settings, Depends(get_settings)]
