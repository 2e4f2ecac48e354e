# api/json_translator/services/backends.py
# 翻訳バックエンド（provider）と、1 テキスト単位のアダプタ
# -*- coding: utf-8 -*-
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Optional

from json_translator.config import Settings, settings

log = logging.getLogger(__name__)

AUTO_LANG = "auto"

# ---------- providers ----------

class Translator:
    """1 テキストを翻訳する。失敗時は例外を投げてよい（アダプタが吸収する）。"""
    name = "base"

    async def translate(self, text: str, src: Optional[str], tgt: str) -> str:
        raise NotImplementedError


class DummyTranslator(Translator):
    name = "dummy"

    async def translate(self, text: str, src: Optional[str], tgt: str) -> str:
        # 開発用：原文の先頭に [tgt] を付与
        return f"[{tgt}] {text}"


class OpenAITranslator(Translator):
    name = "openai"

    def __init__(self, cfg: Settings = settings):
        from openai import AsyncOpenAI
        kwargs = {"timeout": cfg.OPENAI_TIMEOUT_S}
        if cfg.OPENAI_BASE_URL:
            kwargs["base_url"] = cfg.OPENAI_BASE_URL
        if not cfg.OPENAI_API_KEY:
            raise RuntimeError("OPENAI_API_KEY is not set")
        kwargs["api_key"] = cfg.OPENAI_API_KEY
        self.client = AsyncOpenAI(**kwargs)
        self.model = cfg.OPENAI_MODEL

    async def translate(self, text: str, src: Optional[str], tgt: str) -> str:
        source_line = f"Source language: {src}" if src else "Source language: detect automatically"
        messages = [
            {
                "role": "system",
                "content": (
                    "You are a professional software localization translator. "
                    "Translate the user's text into the target language. "
                    "Do not add explanations or quotes. Preserve placeholders like {name}, %(count)s or {{value}}. "
                    "Return the translation only."
                ),
            },
            {
                "role": "user",
                "content": f"{source_line}\nTarget language: {tgt}\nText:\n{text}",
            },
        ]
        resp = await self.client.chat.completions.create(
            model=self.model,
            temperature=0.2,
            messages=messages,
        )
        return (resp.choices[0].message.content or "").strip()


# provider インスタンスはキャッシュ（毎回 OpenAI クライアントを作らない）
_PROVIDER: Optional[Translator] = None

def get_provider(cfg: Settings = settings) -> Translator:
    global _PROVIDER
    if _PROVIDER is not None:
        return _PROVIDER
    if cfg.TRANSLATE_PROVIDER == "openai":
        _PROVIDER = OpenAITranslator(cfg)
    else:
        _PROVIDER = DummyTranslator()
    log.info("translate provider: %s", _PROVIDER.name)
    return _PROVIDER


# ---------- helpers ----------

def _trim(text: Optional[str], limit: int = 1000) -> str:
    if not text:
        return ""
    return (text[:limit] + "…") if len(text) > limit else text


def _elapsed_ms(started: float) -> int:
    return int(round((time.perf_counter() - started) * 1000))


@dataclass(frozen=True)
class TextOutcome:
    """1 回の翻訳呼び出し結果。error があれば text は原文のまま。"""
    text: str
    error: Optional[str] = None
    elapsed_ms: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None


# ---------- adapter ----------

class BackendAdapter:
    """
    provider を 1 テキスト単位で包む。
    - max_length 超の入力は切り詰めて末尾に … を付けてから送る
    - source_lang == "auto" は「言語指定なし」として渡す
    - 空白だけの入力は provider を呼ばずにそのまま返す
    - provider の例外 / 空の結果は握りつぶして原文を返す（translate は決して例外を投げない）
    """

    def __init__(self, provider: Translator, *, max_length: int = 1000):
        self.provider = provider
        self.max_length = max_length

    async def translate(self, text: str, source_lang: str, target_lang: str) -> str:
        return (await self.translate_outcome(text, source_lang, target_lang)).text

    async def translate_outcome(self, text: str, source_lang: str, target_lang: str) -> TextOutcome:
        started = time.perf_counter()
        if not text.strip():
            # 空文字・空白だけの leaf は訳すものが無い。そのまま成功扱い
            return TextOutcome(text=text)
        src = None if (not source_lang or source_lang == AUTO_LANG) else source_lang
        try:
            translated = await self.provider.translate(_trim(text, self.max_length), src, target_lang)
        except Exception as e:
            log.warning("translate failed (%s -> %s): %s", source_lang, target_lang, e)
            return TextOutcome(text=text, error=str(e) or type(e).__name__, elapsed_ms=_elapsed_ms(started))

        if not isinstance(translated, str) or not translated.strip():
            log.warning("translate returned empty result (%s -> %s)", source_lang, target_lang)
            return TextOutcome(text=text, error="Empty translation result", elapsed_ms=_elapsed_ms(started))
        return TextOutcome(text=translated, elapsed_ms=_elapsed_ms(started))
