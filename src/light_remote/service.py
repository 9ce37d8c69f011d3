"""FastAPI service exposing the single light controller session."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from .api.routes_commands import router as commands_router
from .api.routes_session import router as session_router
from .config import SessionConfig, configure_logging
from .session import SessionManager


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the session on startup and release the link on shutdown."""
    config = SessionConfig.from_env()
    configure_logging(config.log_level)
    session = SessionManager(config)
    app.state.session = session
    try:
        yield
    finally:
        await session.shutdown()


app = FastAPI(title="Light Remote Service", lifespan=lifespan)

app.include_router(session_router)
app.include_router(commands_router)


def main() -> None:  # pragma: no cover - thin CLI wrapper
    """Run the FastAPI service under Uvicorn."""
    import uvicorn

    config = SessionConfig.from_env()
    uvicorn.run(
        "light_remote.service:app",
        host=config.service_host,
        port=config.service_port,
    )


if __name__ == "__main__":  # pragma: no cover
    main()
