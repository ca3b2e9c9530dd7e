import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class LoggingService:
    @staticmethod
    def configure(level: str = "INFO") -> None:
        """
        Root logging setup, applied once at startup.
        Unknown level names fall back to INFO.
        """
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            resolved = logging.INFO
        logging.basicConfig(level=resolved, format=LOG_FORMAT)
        logging.getLogger("relay").setLevel(resolved)
