# pyright: reportUnusedCallResult=false
"""jsoncms API server command."""

from typing import Annotated, Literal, cast

from cyclopts import App, Parameter

from jsoncms.cli._commands._context import CLIContext

app = App(name="serve", help="Run the jsoncms API server", help_on_error=True)

LogLevel = Literal["critical", "error", "warning", "info", "debug", "trace"]
HttpImpl = Literal["auto", "h11", "httptools"]


@app.default
def serve(  # noqa: PLR0913
    *,
    host: Annotated[
        str,
        Parameter(help="Bind socket to this host."),
    ] = "127.0.0.1",
    port: Annotated[
        int,
        Parameter(
            help="Bind socket to this port. If 0, an available port is selected."
        ),
    ] = 3000,
    log_level: Annotated[
        LogLevel,
        Parameter(help="Uvicorn log level."),
    ] = "info",
    access_log: Annotated[
        bool,
        Parameter(help="Enable access log."),
    ] = True,
    http: Annotated[
        HttpImpl,
        Parameter(help="HTTP protocol implementation."),
    ] = "auto",
    timeout_keep_alive: Annotated[
        int,
        Parameter(
            help="Close Keep-Alive connections if no new data received in timeout."
        ),
    ] = 5,
    limit_concurrency: Annotated[
        int | None,
        Parameter(help="Maximum number of concurrent connections to allow."),
    ] = None,
    ssl_keyfile: Annotated[
        str | None,
        Parameter(help="SSL key file."),
    ] = None,
    ssl_certfile: Annotated[
        str | None,
        Parameter(help="SSL certificate file."),
    ] = None,
    proxy_headers: Annotated[
        bool,
        Parameter(
            help="Enable X-Forwarded-Proto, X-Forwarded-For for remote address info."
        ),
    ] = True,
    forwarded_allow_ips: Annotated[
        str | None,
        Parameter(help="Comma-separated list of IPs to trust with proxy headers."),
    ] = None,
    uds: Annotated[
        str | None,
        Parameter(help="Bind to a UNIX domain socket."),
    ] = None,
) -> None:
    """Run the jsoncms API server using uvicorn."""
    import socket

    import uvicorn

    from jsoncms.server import create_app

    ctx = CLIContext.get_current()

    effective_port = port

    # Find available port if 0 is specified
    if port == 0:
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
            s.bind((host, 0))
            addr = cast("tuple[str, int]", s.getsockname())
            effective_port = addr[1]

    config: dict[str, object] = {
        "app": create_app(ctx.settings),
        "host": host,
        "port": effective_port,
        "log_level": log_level,
        "access_log": access_log,
        "http": http,
        "timeout_keep_alive": timeout_keep_alive,
        "proxy_headers": proxy_headers,
    }

    if limit_concurrency is not None:
        config["limit_concurrency"] = limit_concurrency

    if ssl_keyfile is not None:
        config["ssl_keyfile"] = ssl_keyfile

    if ssl_certfile is not None:
        config["ssl_certfile"] = ssl_certfile

    if forwarded_allow_ips is not None:
        config["forwarded_allow_ips"] = forwarded_allow_ips

    if uds is not None:
        config["uds"] = uds

    ctx.console.print(f"Starting jsoncms API server on {host}:{effective_port}")
    uvicorn.run(**config)  # pyright: ignore[reportArgumentType]
