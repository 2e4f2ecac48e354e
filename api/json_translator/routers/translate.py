# api/json_translator/routers/translate.py
from fastapi import APIRouter, Depends, Path
from sqlalchemy.orm import Session

from json_translator.config import settings
from json_translator.db import get_session
from json_translator.repos.translation_repo import TranslationRepo
from json_translator.schemas.common import Problem
from json_translator.schemas.translate_run import (
    TranslateRequest,
    TranslateResponse,
    TranslationList,
    TranslationStats,
)
from json_translator.services.backends import Translator, get_provider
from json_translator.services.translate import run_translate as run_translate_service

router = APIRouter(tags=["Translate"])


def get_translator() -> Translator:
    """Depends 用（テストでは dependency_overrides で差し替える）"""
    return get_provider(settings)


@router.post(
    "/translate",
    response_model=TranslateResponse,
    summary="JSON を構造そのままで翻訳",
    responses={code: {"model": Problem} for code in (400, 408, 429, 500)},
)
async def post_translate(
    payload: TranslateRequest,
    session: Session = Depends(get_session),
    translator: Translator = Depends(get_translator),
):
    """文字列 leaf を最大 MAX_TRANSLATED_KEYS 件まで翻訳。上限超過 400 / timeout 408 / rate limit 429。"""
    return await run_translate_service(payload, session, translator, settings)


@router.get("/translations", response_model=TranslationList, summary="翻訳履歴（新しい順）")
def list_translations(session: Session = Depends(get_session)):
    items = TranslationRepo(session).list_recent(limit=settings.HISTORY_LIMIT)
    return {"translations": items, "total": len(items)}


@router.get("/translations/{translation_id}/stats", response_model=TranslationStats, summary="1 run の統計と leaf 明細")
def translation_stats(
    translation_id: int = Path(..., ge=1),
    session: Session = Depends(get_session),
):
    data = TranslationRepo(session).get_with_details(translation_id)  # 無ければ NotFound -> 404
    run = data["translation"]
    total = run["total_keys"] or 0
    data["summary"] = {
        "total_keys": total,
        "translated_keys": run["translated_keys"],
        "failed_keys": run["failed_keys"],
        "success_rate": round(run["translated_keys"] / total * 100, 2) if total > 0 else 0,
        "processing_time_ms": run["processing_time_ms"],
        "average_time_per_key": round(run["processing_time_ms"] / total, 2) if total > 0 else 0,
    }
    return data
