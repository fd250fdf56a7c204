"""
logger 関連の定義。
"""

import sys

from loguru import logger


# 既定のハンドラーを削除し、診断メッセージをエラーストリームに出力するハンドラーを追加
logger.remove()
logger.add(
    sys.stderr,
    format="<g>{time:MM-DD HH:mm:ss}</g> |<lvl>{level:^8}</lvl>| {file}:{line} | {message}",
    backtrace=True,
    diagnose=True,
)
