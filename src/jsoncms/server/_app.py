from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI

from jsoncms.config import Settings
from jsoncms.content import ContentStore
from jsoncms.exceptions import ConfigError, GitError, JsoncmsError
from jsoncms.repository import ContentRepository
from jsoncms.server._errors import register_exception_handlers
from jsoncms.server._routes import router as api_router
from jsoncms.utils import create_logger

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from structlog.typing import FilteringBoundLogger


def create_app(
    settings: Settings | None = None,
    *,
    store: ContentStore | None = None,
    repository: ContentRepository | None = None,
    logger: "FilteringBoundLogger | None" = None,  # noqa: UP037
) -> FastAPI:
    """Create the HTTP application.

    Components not supplied are built from ``settings``, which default to
    ``Settings.load()`` for the current directory. A repository that cannot
    be opened does not prevent startup: content routes keep working and the
    Git routes answer with the error that occurred.

    Args:
        settings: Loaded settings.
        store: Content store to serve.
        repository: Git repository to serve.
        logger: Logger for request failures and lifecycle events.

    Returns:
        The FastAPI application. Components it built itself are closed when
        the application shuts down.
    """
    if settings is None:
        settings = Settings.load()
    if logger is None:
        logger = create_logger(
            level=settings.logging.level.value,
            log_format=settings.logging.format.value,  # type: ignore[arg-type]
            log_file=settings.logging.file,
            max_bytes=settings.logging.max_bytes,
            backup_count=settings.logging.backup_count,
            component="server",
        )

    owned: list[ContentStore | ContentRepository] = []
    if store is None:
        store = ContentStore.from_settings(settings, logger=logger)
        owned.append(store)

    repository_error: JsoncmsError | None = None
    if repository is None:
        try:
            repository = ContentRepository.from_settings(settings, logger=logger)
        except (ConfigError, GitError) as e:
            logger.warning(
                "repository_unavailable", kind=e.kind.value, error=e.message
            )
            repository_error = e
        else:
            owned.append(repository)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> "AsyncGenerator[None]":  # noqa: UP037
        logger.info(
            "server_started",
            content_root=str(store.local.root.path),
            remote=store.remote is not None,
            repository=repository is not None,
        )
        yield
        for resource in owned:
            resource.close()
        logger.info("server_stopped")

    app = FastAPI(
        title="jsoncms", docs_url=None, redoc_url="/api-docs", lifespan=lifespan
    )
    app.state.settings = settings
    app.state.store = store
    app.state.repository = repository
    app.state.repository_error = repository_error

    register_exception_handlers(app, logger)
    app.include_router(router=api_router)
    return app
