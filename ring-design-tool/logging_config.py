"""
ログ設定
"""

import logging
import os


def configure_logging(default_level: str = "INFO") -> None:
    """環境変数 LOG_LEVEL (未指定なら default_level) でルートロガーを設定する"""
    level_name = os.getenv("LOG_LEVEL", default_level).upper()
    level = getattr(logging, level_name, logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
