"""Logging configuration for the Wazuh active-response log."""

import logging


class ActiveResponseFormatter(logging.Formatter):
    """Prefixes messages with a level tag, as Wazuh active-response scripts do."""

    LEVEL_MAP = {
        logging.DEBUG: "DEBUG | ",
        logging.INFO: "",
        logging.WARNING: "WARNING | ",
        logging.ERROR: "ERROR | ",
        logging.CRITICAL: "ERROR | ",
    }

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record with a level prefix on the message."""
        prefix = self.LEVEL_MAP.get(record.levelno, "")
        if not prefix:
            return super().format(record)

        original = record.msg
        record.msg = f"{prefix}{original}"
        try:
            return super().format(record)
        finally:
            record.msg = original


def setup_logging(log_file: str, debug: bool = False) -> logging.Logger:
    """
    Set up logging for the pipeline.

    Args:
        log_file: Path of the append-only diagnostics log
        debug: Enable debug-level logging

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger("misp_match")
    logger.setLevel(logging.DEBUG if debug else logging.INFO)

    for existing in list(logger.handlers):
        if getattr(existing, "_misp_match_handler", False):
            logger.removeHandler(existing)
            existing.close()

    handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
    handler.setFormatter(ActiveResponseFormatter(fmt="%(asctime)s [%(name)s] %(message)s"))
    handler._misp_match_handler = True  # type: ignore[attr-defined]

    logger.addHandler(handler)
    return logger
