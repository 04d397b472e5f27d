"""Root logger setup for the CLI and the import trigger."""

from __future__ import annotations

import logging


def configure_logging(*, level: int = logging.INFO, force: bool = False) -> None:
    """Route every ``catalogsync`` logger to stderr at ``level``.

    Per-request chatter from ``httpx`` is held at WARNING unless ``level`` is
    stricter, since a batch issues several requests per record.
    """

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))
