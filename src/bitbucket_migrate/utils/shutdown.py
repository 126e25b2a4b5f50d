"""Process shutdown handling."""

import asyncio
import signal
from typing import Iterable

from loguru import logger

SHUTDOWN_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class MigrationInterrupted(Exception):
    """The run was aborted by a termination signal."""


def install_shutdown_handlers(
    task: asyncio.Task, signals: Iterable[signal.Signals] = SHUTDOWN_SIGNALS
) -> None:
    """Cancel ``task`` when the process receives a termination signal.

    The step that is suspended at that moment is abandoned as-is.
    """
    loop = asyncio.get_running_loop()

    def _shutdown(sig: signal.Signals) -> None:
        logger.warning(f'Received {sig.name}, aborting migration')
        task.cancel()

    for sig in signals:
        try:
            loop.add_signal_handler(sig, _shutdown, sig)
        except (NotImplementedError, RuntimeError):
            # Signal handlers are unavailable on some platforms and threads
            logger.debug(f'Cannot install handler for {sig.name}')
