# translations / translation_details の読み書き用リポジトリ（Sessionベース）
# - begin(): run 行を in_progress + translated_json='' で作成し id を返す
# - complete(): run 行を 1 回だけ更新 + leaf ごとの detail を INSERT
# - fail(): timeout / 想定外エラーで終了した run を failed に
# - list_recent(): 履歴（新しい順、サマリ列のみ）
# - get() / get_details(): 1 run の詳細
# commit は呼び出し側（services / get_session）が行う

from __future__ import annotations
from typing import Any, Dict, List, Sequence

from sqlalchemy import func, select

from json_translator.repos.base_core import BaseCoreRepo
from json_translator.repos.tables import translation_details, translations

SUMMARY_COLUMNS = (
    "id", "session_id", "source_language", "target_language",
    "total_keys", "translated_keys", "failed_keys", "processing_time_ms",
    "status", "created_at",
)


class TranslationDetailRepo(BaseCoreRepo):
    TABLE = translation_details

    def list_for_run(self, translation_id: int) -> List[dict]:
        t = self._ensure_table()
        # 挿入順 = 抽出（走査）順
        return self.list_where(order_by=[t.c.id.asc()], translation_id=translation_id)


class TranslationRepo(BaseCoreRepo):
    TABLE = translations

    def __init__(self, session, **kw):
        super().__init__(session, **kw)
        self.details = TranslationDetailRepo(session)

    def begin(
        self,
        *,
        session_id: str,
        source_lang: str,
        target_lang: str,
        original_json: str,
        total_keys: int,
    ) -> int:
        return self.create(
            session_id=session_id,
            source_language=source_lang,
            target_language=target_lang,
            original_json=original_json,
            translated_json="",
            total_keys=total_keys,
            translated_keys=0,
            failed_keys=0,
            processing_time_ms=0,
            status="in_progress",
        )

    def complete(self, id: int, translated_json: str, statistics, details: Sequence[Any]) -> None:
        """
        statistics: PipelineStatistics、details: TranslationDetail（as_row() を持つもの）
        failed_keys 列には failed + skipped を入れる。
        """
        self.update_by_id(
            id,
            {
                "translated_json": translated_json,
                "total_keys": statistics.total_keys,
                "translated_keys": statistics.translated_keys,
                "failed_keys": statistics.failed_keys + statistics.skipped_keys,
                "processing_time_ms": statistics.processing_time_ms,
                "status": "completed",
                "updated_at": func.now(),
            },
        )
        self.details.create_many([dict(d.as_row(), translation_id=id) for d in details])

    def fail(self, id: int, error_message: str, processing_time_ms: int) -> None:
        self.update_by_id(
            id,
            {
                "status": "failed",
                "error_message": (error_message or "")[:500],
                "processing_time_ms": processing_time_ms,
                "updated_at": func.now(),
            },
        )

    def list_recent(self, *, limit: int = 50) -> List[dict]:
        t = self._ensure_table()
        cols = [t.c[name] for name in SUMMARY_COLUMNS]
        rows = self.sess.execute(
            select(*cols).order_by(t.c.created_at.desc(), t.c.id.desc()).limit(limit)
        ).mappings().all()
        return [dict(r) for r in rows]

    def get_details(self, id: int) -> List[dict]:
        return self.details.list_for_run(id)

    def get_with_details(self, id: int) -> Dict[str, Any]:
        run = self.get(id)
        return {"translation": run, "details": self.get_details(id)}
