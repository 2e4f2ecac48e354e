# api/json_translator/routers/status.py
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from json_translator.db import get_session
from json_translator.repos.tables import DETAIL_STATUSES, RUN_STATUSES
from json_translator.repos.translation_repo import TranslationRepo

router = APIRouter(tags=["Status"], prefix="/status")


@router.get("/summary", summary="状態別件数サマリ")
def status_summary(sess: Session = Depends(get_session)):
    """
    translations（run の status）と translation_details（leaf の status）の件数を返す。
    存在しない status は 0 埋め。
    """
    repo = TranslationRepo(sess)
    runs = repo.count_by_status()
    details = repo.details.count_by_status()
    return {
        "translations": {k: int(runs.get(k, 0)) for k in RUN_STATUSES},
        "details": {k: int(details.get(k, 0)) for k in DETAIL_STATUSES},
    }
