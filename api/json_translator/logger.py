# api/json_translator/logger.py
import logging
import sys


def setup_logging(level: str = "INFO") -> logging.Logger:
    """パッケージ共通ロガー（json_translator.*）に stdout ハンドラを 1 つだけ付ける。"""
    logger = logging.getLogger("json_translator")
    if logger.handlers:
        return logger
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    h = logging.StreamHandler(sys.stdout)
    fmt = logging.Formatter("[%(asctime)s] [%(levelname)s] %(name)s: %(message)s", "%Y-%m-%d %H:%M:%S")
    h.setFormatter(fmt)
    logger.addHandler(h)
    return logger
