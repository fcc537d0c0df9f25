"""
日誌工具
"""

import logging

from config import settings


def get_logger(name: str) -> logging.Logger:
    """取得帶命名空間的 logger"""
    logger = logging.getLogger(f"slowlog.{name}")
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
        )
        logger.addHandler(handler)
        logger.setLevel(getattr(logging, settings.log_level, logging.INFO))
        logger.propagate = False
    return logger
