# api/json_translator/services/errors.py
# 翻訳 run の失敗種別。main.py の exception handler が {error, message, suggestion} に変換する。
from __future__ import annotations

import re
from typing import Optional

SUGGEST_SMALLER = "Try again with a smaller JSON document (fewer string values)."
SUGGEST_WAIT = "The translation service is rate limiting requests. Wait a moment and retry."

# バックエンド由来の例外メッセージから RateLimit を判定する
_RATE_LIMIT_RE = re.compile(r"rate[\s_-]?limit|too many requests|\b429\b|quota", re.IGNORECASE)


class TranslatorError(Exception):
    status_code = 500
    title = "Translation failed"

    def __init__(self, message: str, *, suggestion: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.suggestion = suggestion

    def to_dict(self) -> dict:
        body = {"error": self.title, "message": self.message}
        if self.suggestion:
            body["suggestion"] = self.suggestion
        return body


class InputError(TranslatorError):
    """必須項目なし / JSON 構文エラー（バックエンドは呼ばない）"""
    status_code = 400
    title = "Invalid input"


class SizeLimitError(InputError):
    title = "JSON too large"

    def __init__(self, count: int, limit: int):
        super().__init__(
            f"JSON contains {count} string values; the maximum is {limit}.",
            suggestion=SUGGEST_SMALLER,
        )
        self.count = count
        self.limit = limit


class PipelineTimeout(TranslatorError):
    status_code = 408
    title = "Translation timed out"

    def __init__(self, timeout_s: float):
        super().__init__(
            f"Translation did not finish within {timeout_s:g} seconds.",
            suggestion=SUGGEST_SMALLER,
        )
        self.timeout_s = timeout_s


class RateLimited(TranslatorError):
    status_code = 429
    title = "Rate limited"

    def __init__(self, message: str):
        super().__init__(message, suggestion=SUGGEST_WAIT)


class BatchError(TranslatorError):
    """バッチ翻訳中の想定外エラー。run 内で全 leaf を failed にして吸収する。"""


def is_rate_limit_message(message: str) -> bool:
    return bool(_RATE_LIMIT_RE.search(message or ""))


def classify_failure(exc: BaseException) -> TranslatorError:
    """想定外の例外を HTTP に返せる TranslatorError に寄せる"""
    if isinstance(exc, TranslatorError):
        return exc
    message = str(exc) or type(exc).__name__
    if is_rate_limit_message(message):
        return RateLimited(message)
    return TranslatorError(message, suggestion=SUGGEST_SMALLER)
