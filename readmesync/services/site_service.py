"""Hugo output stage -- content files and the site generator run.

Writes one TOML front-matter page per README under the configured
content directory, then runs ``hugo`` once over the whole site.  Files
already written stay in place if a later write or the hugo run fails.
"""

import asyncio
import logging
import subprocess
from datetime import datetime
from pathlib import Path

from readmesync.config import Settings
from readmesync.errors import GeneratorError, LocalIOError

logger = logging.getLogger(__name__)

CONTENT_EXT = ".md"

_PROJECT_TEMPLATE = """
+++
date = "{date}"
title = "{name}"
repo = "{name}"
url = "/{name}"
+++

{readme}
"""


def render_project(name: str, readme: str, date: str) -> str:
    """Render a project page: front matter, then the README verbatim."""
    return _PROJECT_TEMPLATE.format(name=name, readme=readme, date=date)


def is_safe_name(name: str) -> bool:
    """True when *name* can be used as a single file name under the content dir."""
    return bool(name) and name not in (".", "..") and not any(sep in name for sep in "/\\")


def content_dir(settings: Settings) -> Path:
    """Directory inside the hugo source tree that holds project pages.

    ``OUTPUT_DIR`` is always relative to ``HUGO_SOURCE``, even when it is
    written with a leading slash (``/content/project``).
    """
    return Path(settings.HUGO_SOURCE) / settings.OUTPUT_DIR.lstrip("/")


def write_content(
    readmes: dict[str, bytes],
    settings: Settings,
    *,
    now: datetime | None = None,
) -> list[Path]:
    """Write one page per README and return the paths written.

    Raises :class:`LocalIOError` on the first file that cannot be written.
    """
    date = (now or datetime.now().astimezone()).isoformat(timespec="seconds")
    target = content_dir(settings)
    written: list[Path] = []
    for name, readme in readmes.items():
        if not is_safe_name(name):
            logger.error("Refusing to write page for unsafe name %r", name)
            raise LocalIOError(f"Unsafe project name: {name!r}")
        path = target / f"{name}{CONTENT_EXT}"
        page = render_project(name, readme.decode("utf-8", errors="replace"), date)
        try:
            path.write_text(page, encoding="utf-8")
        except OSError as exc:
            logger.error("Could not write %s: %s", path, exc)
            raise LocalIOError(f"Could not write {path}: {exc}") from exc
        written.append(path)
    return written


def _generator_args(settings: Settings) -> list[str]:
    return [
        settings.HUGO_CMD,
        f"--config={settings.HUGO_CONFIG}",
        f"--source={settings.HUGO_SOURCE}",
        f"--destination={settings.HUGO_OUTPUT}",
    ]


async def run_generator(settings: Settings) -> str:
    """Run hugo over the site and return its combined stdout+stderr.

    Uses subprocess.run in a thread, the same way the git wrapper does.
    Raises :class:`GeneratorError` on non-zero exit, timeout or when the
    binary cannot be started.
    """
    args = _generator_args(settings)

    def _sync() -> subprocess.CompletedProcess[str]:
        return subprocess.run(
            args,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            timeout=settings.GENERATOR_TIMEOUT_SECONDS,
        )

    try:
        result = await asyncio.to_thread(_sync)
    except subprocess.TimeoutExpired as exc:
        output = exc.output or ""
        if isinstance(output, bytes):
            output = output.decode("utf-8", errors="replace")
        logger.error("hugo timed out after %ss:\n%s", settings.GENERATOR_TIMEOUT_SECONDS, output)
        raise GeneratorError("hugo timed out", output=output) from exc
    except OSError as exc:
        logger.error("hugo could not be started (%s): %s", settings.HUGO_CMD, exc)
        raise GeneratorError(f"hugo could not be started: {exc}") from exc

    output = result.stdout or ""
    if result.returncode != 0:
        logger.error("hugo failed (rc=%d):\n%s", result.returncode, output)
        raise GeneratorError(f"hugo exited with status {result.returncode}", output=output)

    logger.info("hugo output:\n%s", output)
    return output


async def publish(readmes: dict[str, bytes], settings: Settings) -> str:
    """Write every README as a page, then rebuild the site once."""
    written = write_content(readmes, settings)
    logger.info("Wrote %d content file(s) to %s", len(written), content_dir(settings))
    return await run_generator(settings)
