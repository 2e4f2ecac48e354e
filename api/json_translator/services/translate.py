# JSON translation run (extract -> batch translate -> rebuild)
# -*- coding: utf-8 -*-
from __future__ import annotations

import asyncio
import json
import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from json_translator.config import Settings, settings as default_settings
from json_translator.repos.translation_repo import TranslationRepo
from json_translator.services.backends import BackendAdapter, TextOutcome, Translator
from json_translator.services.batching import BatchScheduler
from json_translator.services.errors import (
    InputError,
    PipelineTimeout,
    SizeLimitError,
    classify_failure,
)
from json_translator.services.json_walk import count_string_leaves, extract_strings, rebuild

log = logging.getLogger(__name__)

SUCCESS = "success"
FAILED = "failed"
SKIPPED = "skipped"


# ---------- result types ----------

@dataclass(frozen=True)
class TranslationDetail:
    path: str
    original: str
    translated: Optional[str]
    status: str
    error: Optional[str] = None
    elapsed_ms: int = 0

    def as_row(self) -> Dict[str, Any]:
        """translation_details の列名で返す（API レスポンスも同じ形）"""
        return {
            "json_key": self.path,
            "original_value": self.original,
            "translated_value": self.translated,
            "status": self.status,
            "error_message": self.error,
            "translation_time_ms": self.elapsed_ms,
        }


@dataclass(frozen=True)
class PipelineStatistics:
    total_keys: int
    translated_keys: int
    failed_keys: int
    skipped_keys: int
    processing_time_ms: int

    @property
    def average_time_per_key(self) -> float:
        if self.total_keys <= 0:
            return 0
        return self.processing_time_ms / self.total_keys


@dataclass
class PipelineResult:
    translated_json: Any
    statistics: PipelineStatistics
    details: List[TranslationDetail] = field(default_factory=list)
    warning: Optional[str] = None


# ---------- pipeline ----------

def check_size(document: Any, cfg: Settings) -> int:
    """文字列 leaf 数を数え、上限超なら SizeLimitError（バックエンド呼び出し前に判定）"""
    total = count_string_leaves(document)
    if total > cfg.MAX_STRING_KEYS:
        raise SizeLimitError(total, cfg.MAX_STRING_KEYS)
    return total


def build_scheduler(provider: Translator, cfg: Settings) -> BatchScheduler:
    adapter = BackendAdapter(provider, max_length=cfg.MAX_TEXT_LENGTH)
    return BatchScheduler(adapter, batch_size=cfg.BATCH_SIZE, delay_s=cfg.BATCH_DELAY_S)


def _statistics(details: List[TranslationDetail], elapsed_ms: int) -> PipelineStatistics:
    return PipelineStatistics(
        total_keys=len(details),
        translated_keys=sum(1 for d in details if d.status == SUCCESS),
        failed_keys=sum(1 for d in details if d.status == FAILED),
        skipped_keys=sum(1 for d in details if d.status == SKIPPED),
        processing_time_ms=elapsed_ms,
    )


async def _translate_document(
    document: Any,
    source_lang: str,
    target_lang: str,
    scheduler: BatchScheduler,
    cfg: Settings,
    started: float,
) -> PipelineResult:
    leaves = extract_strings(document)
    submitted = leaves[: cfg.MAX_TRANSLATED_KEYS]
    overflow = leaves[cfg.MAX_TRANSLATED_KEYS:]

    warning = None
    if overflow:
        warning = (
            f"Only the first {len(submitted)} of {len(leaves)} string values were translated; "
            f"the remaining {len(overflow)} were left unchanged."
        )
        log.warning("run limited to %s of %s keys", len(submitted), len(leaves))

    details: List[TranslationDetail] = []
    batch_started = time.perf_counter()
    try:
        outcomes: List[TextOutcome] = await scheduler.translate_all(
            [text for _, text in submitted], source_lang, target_lang
        )
    except Exception as e:
        # バッチ全体が落ちたら run 内の全 leaf を failed、出力は原文のまま
        log.exception("batch translation failed")
        message = str(e) or type(e).__name__
        batch_ms = int(round((time.perf_counter() - batch_started) * 1000))
        for i, (path, text) in enumerate(leaves):
            details.append(
                TranslationDetail(path, text, None, FAILED, message, batch_ms if i < len(submitted) else 0)
            )
        elapsed = int(round((time.perf_counter() - started) * 1000))
        return PipelineResult(rebuild(document, {}), _statistics(details, elapsed), details, warning)

    tmap: Dict[str, str] = {}
    for (path, text), outcome in zip(submitted, outcomes):
        if outcome.ok:
            tmap[path] = outcome.text
            details.append(TranslationDetail(path, text, outcome.text, SUCCESS, None, outcome.elapsed_ms))
        else:
            details.append(TranslationDetail(path, text, None, FAILED, outcome.error, outcome.elapsed_ms))
    for path, text in overflow:
        details.append(TranslationDetail(path, text, None, SKIPPED, None, 0))

    translated = rebuild(document, tmap)
    elapsed = int(round((time.perf_counter() - started) * 1000))
    return PipelineResult(translated, _statistics(details, elapsed), details, warning)


async def run_pipeline(
    document: Any,
    source_lang: str,
    target_lang: str,
    *,
    scheduler: BatchScheduler,
    cfg: Settings = default_settings,
) -> PipelineResult:
    """
    counting -> (上限超: rejected) | translating -> (timeout: failed) | reconstructing -> completed
    永続化はしない（呼び出し側の責務）。リトライもしない。
    """
    started = time.perf_counter()
    check_size(document, cfg)
    try:
        return await asyncio.wait_for(
            _translate_document(document, source_lang, target_lang, scheduler, cfg, started),
            timeout=cfg.TRANSLATE_TIMEOUT_S,
        )
    except asyncio.TimeoutError as e:
        raise PipelineTimeout(cfg.TRANSLATE_TIMEOUT_S) from e


# ---------- public api ----------

def parse_json_data(json_data: Any) -> Any:
    """jsonData は文字列（JSON テキスト）でも object/array でもよい"""
    if isinstance(json_data, str):
        try:
            return json.loads(json_data)
        except json.JSONDecodeError as e:
            raise InputError(f"Invalid JSON: {e.msg} (line {e.lineno}, column {e.colno})") from e
    return json_data


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


# 同期の DB 書き込み（+ commit）は threadpool で回し、event loop を塞がない

def _begin(repo: TranslationRepo, **values: Any) -> int:
    translation_id = repo.begin(**values)
    repo.db.commit()
    return translation_id


def _fail(repo: TranslationRepo, translation_id: int, message: str, elapsed_ms: int) -> None:
    repo.fail(translation_id, message, elapsed_ms)
    repo.db.commit()


def _complete(repo: TranslationRepo, translation_id: int, result: PipelineResult) -> None:
    repo.complete(
        translation_id, json.dumps(result.translated_json, ensure_ascii=False), result.statistics, result.details
    )
    repo.db.commit()


async def run_translate(
    payload,
    session: Session,
    provider: Translator,
    cfg: Settings = default_settings,
) -> Dict[str, Any]:
    """
    TranslateRequest -> TranslateResponse (dict)
    translations 行を先に作って commit（in_progress）、完了後に 1 回だけ更新する。
    DB 呼び出しは run_in_threadpool 経由、翻訳は event loop 上で行う。
    """
    if _is_blank(payload.json_data) or _is_blank(payload.target_lang):
        raise InputError("JSON data and target language are required")

    source_lang = payload.source_lang or "auto"
    target_lang = payload.target_lang
    document = parse_json_data(payload.json_data)
    total_keys = check_size(document, cfg)

    repo = TranslationRepo(session)
    session_id = str(uuid.uuid4())
    started = time.perf_counter()
    translation_id = await run_in_threadpool(
        _begin,
        repo,
        session_id=session_id,
        source_lang=source_lang,
        target_lang=target_lang,
        original_json=json.dumps(document, ensure_ascii=False),
        total_keys=total_keys,
    )
    log.info("run %s started: keys=%s %s -> %s", translation_id, total_keys, source_lang, target_lang)

    scheduler = build_scheduler(provider, cfg)
    try:
        result = await run_pipeline(document, source_lang, target_lang, scheduler=scheduler, cfg=cfg)
    except Exception as e:
        err = classify_failure(e)
        if err is e:
            log.warning("run %s failed: %s", translation_id, err.message)
        else:
            log.exception("run %s failed unexpectedly", translation_id)
        await run_in_threadpool(_fail, repo, translation_id, err.message, int(round((time.perf_counter() - started) * 1000)))
        if err is e:
            raise
        raise err from e

    await run_in_threadpool(_complete, repo, translation_id, result)

    stats = result.statistics
    log.info(
        "run %s completed: translated=%s failed=%s skipped=%s time_ms=%s",
        translation_id, stats.translated_keys, stats.failed_keys, stats.skipped_keys, stats.processing_time_ms,
    )

    res: Dict[str, Any] = {
        "success": True,
        "translation_id": translation_id,
        "session_id": session_id,
        "translated_json": result.translated_json,
        "statistics": {
            "total_keys": stats.total_keys,
            "translated_keys": stats.translated_keys,
            "failed_keys": stats.failed_keys,
            "skipped_keys": stats.skipped_keys,
            "processing_time_ms": stats.processing_time_ms,
            "average_time_per_key": stats.average_time_per_key,
        },
        "details": [d.as_row() for d in result.details],
    }
    if result.warning:
        res["warning"] = result.warning
    return res
