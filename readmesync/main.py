"""readmesync -- FastAPI application entry point."""

import logging
import sys
from contextlib import asynccontextmanager
from logging.handlers import RotatingFileHandler
from pathlib import Path

import uvicorn
from fastapi import FastAPI
from pydantic import ValidationError

from readmesync.api.routers.health import router as health_router
from readmesync.api.routers.webhooks import router as webhooks_router
from readmesync.clients import github_client
from readmesync.config import VERSION, Settings, describe_setting, load_settings
from readmesync.errors import ConfigError
from readmesync.middleware import RequestIDMiddleware
from readmesync.middleware.access_log import AccessLogMiddleware
from readmesync.middleware.exception_handler import setup_exception_handlers

logger = logging.getLogger(__name__)


class _ColorFormatter(logging.Formatter):
    """ANSI-colored log formatter for terminal output."""

    _COLORS = {
        logging.DEBUG:    "\033[36m",     # cyan
        logging.INFO:     "\033[32m",     # green
        logging.WARNING:  "\033[33m",     # yellow
        logging.ERROR:    "\033[31m",     # red
        logging.CRITICAL: "\033[1;31m",   # bold red
    }
    _RESET = "\033[0m"
    _DIM = "\033[2m"

    def format(self, record: logging.LogRecord) -> str:
        color = self._COLORS.get(record.levelno, "")
        ts = self.formatTime(record, "%H:%M:%S")
        name = record.name.split(".")[-1][:16]
        msg = record.getMessage()
        if record.exc_info:
            msg = f"{msg}\n{self.formatException(record.exc_info)}"
        return (
            f"{self._DIM}{ts}{self._RESET} "
            f"{color}{record.levelname:<8s}{self._RESET} "
            f"{self._DIM}[{name:>16s}]{self._RESET} "
            f"{color}{msg}{self._RESET}"
        )


class _PlainFormatter(logging.Formatter):
    """Plain-text formatter for file logs (no ANSI codes)."""

    def format(self, record: logging.LogRecord) -> str:
        ts = self.formatTime(record, "%Y-%m-%d %H:%M:%S")
        name = record.name.split(".")[-1][:16]
        msg = record.getMessage()
        if record.exc_info:
            msg = f"{msg}\n{self.formatException(record.exc_info)}"
        return f"{ts} {record.levelname:<8s} [{name:>16s}] {msg}"


def configure_logging(level: str = "INFO", log_file: str = "") -> None:
    """Wire the root logger: colored stderr plus an optional rotating file."""
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(_ColorFormatter())
    handlers: list[logging.Handler] = [handler]

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            str(log_path),
            maxBytes=10 * 1024 * 1024,  # 10 MB per file
            backupCount=3,
            encoding="utf-8",
        )
        file_handler.setFormatter(_PlainFormatter())
        handlers.append(file_handler)

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        handlers=handlers,
        force=True,
    )

    # Quiet noisy loggers: the access middleware already logs requests
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(application: FastAPI):
    """Application lifespan: startup and shutdown hooks."""
    settings: Settings = application.state.settings
    github_client.open_client(settings.FETCH_TIMEOUT_SECONDS)
    logger.info(
        "readmesync %s ready: org=%s branch=%s content=%s",
        VERSION,
        settings.GITHUB_ORG,
        settings.RELEASE_BRANCH,
        settings.OUTPUT_DIR,
    )
    yield
    await github_client.close_client()


def create_app(settings: Settings) -> FastAPI:
    """Create and configure the FastAPI application around *settings*."""
    application = FastAPI(
        title="readmesync",
        version=VERSION,
        description="Sync GitHub READMEs into a Hugo site on push",
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
    )
    application.state.settings = settings

    setup_exception_handlers(application)

    # AccessLog innermost (added first), RequestID outermost (runs first).
    application.add_middleware(AccessLogMiddleware)
    application.add_middleware(RequestIDMiddleware)

    application.include_router(health_router)
    application.include_router(webhooks_router)
    return application


def main() -> None:
    """Console entry point: validate the environment, then serve."""
    try:
        settings = load_settings()
    except ConfigError as exc:
        configure_logging()
        for name in exc.missing:
            logger.error(describe_setting(name))
        sys.exit(1)
    except ValidationError as exc:
        configure_logging()
        for error in exc.errors():
            name = ".".join(str(part) for part in error["loc"])
            logger.error("%s has an invalid value: %s", name, error["msg"])
        sys.exit(1)

    configure_logging(settings.LOG_LEVEL, settings.LOG_FILE)
    uvicorn.run(
        create_app(settings),
        host=settings.HOST,
        port=settings.PORT,
        log_config=None,
    )


if __name__ == "__main__":
    main()
