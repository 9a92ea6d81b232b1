import logging
import sys
from typing import TextIO


class Log:
    """Shared SDK logger.

    Library code only emits records. Handlers are installed by ``configure``,
    which the CLI calls; applications embedding the SDK may configure the
    ``storage_brain`` logger themselves instead.
    """

    _logger: logging.Logger = logging.getLogger("storage_brain")

    @classmethod
    def configure(cls, log_level: str, stream: TextIO | None = None) -> None:
        """Set the level and attach one stream handler, stdout unless ``stream`` is given."""
        cls._logger.setLevel(log_level.upper())
        if not cls._logger.handlers:
            handler = logging.StreamHandler(stream or sys.stdout)
            handler.setFormatter(
                logging.Formatter("%(asctime)s [%(levelname)s] %(message)s")
            )
            cls._logger.addHandler(handler)

    @classmethod
    def info(cls, message: str, **kwargs: object) -> None:
        """Emit an INFO record; keyword arguments become record attributes."""
        cls._logger.info(message, extra=kwargs)

    @classmethod
    def error(cls, message: str, **kwargs: object) -> None:
        """Emit an ERROR record; keyword arguments become record attributes."""
        cls._logger.error(message, extra=kwargs)

    @classmethod
    def warning(cls, message: str, **kwargs: object) -> None:
        """Emit a WARNING record; keyword arguments become record attributes."""
        cls._logger.warning(message, extra=kwargs)

    @classmethod
    def debug(cls, message: str, **kwargs: object) -> None:
        """Emit a DEBUG record; keyword arguments become record attributes."""
        cls._logger.debug(message, extra=kwargs)
