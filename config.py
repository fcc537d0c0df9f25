"""
執行期設定
"""

import os
from dataclasses import dataclass


def _env_float(name: str, default: float) -> float:
    """讀取浮點數環境變數，格式錯誤時使用預設值"""
    value = os.environ.get(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _env_int(name: str, default: int) -> int:
    """讀取整數環境變數，格式錯誤時使用預設值"""
    value = os.environ.get(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    """慢查詢分析設定"""
    slow_query_threshold: float = _env_float("SLOWLOG_SLOW_THRESHOLD", 10.0)
    high_examine_ratio: float = _env_float("SLOWLOG_HIGH_EXAMINE_RATIO", 1000.0)
    heavy_avg_rows: int = _env_int("SLOWLOG_HEAVY_AVG_ROWS", 1_000_000)
    top_total_time_limit: int = _env_int("SLOWLOG_TOP_TOTAL_TIME", 10)
    top_avg_time_limit: int = _env_int("SLOWLOG_TOP_AVG_TIME", 20)
    max_upload_bytes: int = _env_int("SLOWLOG_MAX_UPLOAD_BYTES", 512 * 1024 * 1024)
    host: str = os.environ.get("SLOWLOG_HOST", "0.0.0.0")
    port: int = _env_int("SLOWLOG_PORT", 8000)
    log_level: str = os.environ.get("SLOWLOG_LOG_LEVEL", "INFO").upper()
    preload_log: str = os.environ.get("SLOWLOG_PRELOAD_LOG", "")


settings = Settings()
