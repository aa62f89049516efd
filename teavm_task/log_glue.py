"""Route TeaVM's log calls into a standard logger."""

import logging
from typing import Optional


class TeaVMLoggerGlue:
    """
    Adapter from the compiler's log interface to a logging.Logger.

    TeaVM logs with info/debug/warning/error, each optionally carrying an
    exception. Messages are tagged with the ``teavm_log`` event so they can
    be told apart from the task's own messages in structured logs.
    """

    def __init__(self, logger: logging.Logger):
        self.logger = logger

    def _log(self, level: int, text: str, error: Optional[BaseException]) -> None:
        self.logger.log(
            level,
            text,
            exc_info=error,
            extra={"task": "teavm", "event": "teavm_log"},
        )

    def info(self, text: str, error: Optional[BaseException] = None) -> None:
        self._log(logging.INFO, text, error)

    def debug(self, text: str, error: Optional[BaseException] = None) -> None:
        self._log(logging.DEBUG, text, error)

    def warning(self, text: str, error: Optional[BaseException] = None) -> None:
        self._log(logging.WARNING, text, error)

    def error(self, text: str, error: Optional[BaseException] = None) -> None:
        self._log(logging.ERROR, text, error)
