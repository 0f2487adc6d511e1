from __future__ import annotations

import logging
import sys


def setup_logging(level: str = "INFO", log_file: str = "") -> None:
    log_level = getattr(logging, str(level).strip().upper(), None)
    if not isinstance(log_level, int):
        log_level = logging.INFO

    logger = logging.getLogger()
    logger.setLevel(log_level)
    if logger.hasHandlers():
        logger.handlers.clear()

    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)-7.7s] %(name)s: %(message)s"))
    logger.addHandler(stream_handler)

    if not log_file:
        return

    try:
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
    except OSError as e:
        logging.error("Could not open log file %s: %s. Logging to stderr only.", log_file, e)
        return
    file_handler.setFormatter(
        logging.Formatter("%(asctime)s [%(levelname)-5.5s] %(name)s (%(module)s.%(funcName)s:%(lineno)d): %(message)s")
    )
    logger.addHandler(file_handler)
    logging.info("File logging initialized. Level: %s. Output to: %s", logging.getLevelName(log_level), log_file)
