"""Diagnostic logging setup.

Modules log through ``logging.getLogger(__name__)``; the CLI calls
:func:`setup_logging` once so records render through Rich on stderr.
Operator-facing messages do not go through logging, they use the
console.
"""

from __future__ import annotations

import logging

__all__ = ["setup_logging"]

_ROOT_LOGGER = "reltag"


def setup_logging(*, verbose: bool = False) -> logging.Logger:
    """Attach a Rich handler to the ``reltag`` logger.

    Calling it again replaces the previous handler, so the level can be
    changed between CLI invocations in the same process (tests).
    """
    from rich.console import Console
    from rich.logging import RichHandler

    logger = logging.getLogger(_ROOT_LOGGER)
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(
        console=Console(stderr=True),
        show_time=verbose,
        show_path=False,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    return logger
