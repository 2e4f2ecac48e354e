from pydantic import ConfigDict, Field
from typing import Any, List, Literal, Optional
from datetime import datetime
from .common import AUTO_LANG, CamelModel

DetailStatus = Literal["success", "failed", "skipped"]
RunStatus = Literal["in_progress", "completed", "failed"]


class TranslateRequest(CamelModel):
    # 必須チェックは service 側で行う（欠落は 400 で返すため Optional）
    json_data: Optional[Any] = Field(None, description="JSON テキスト、または object / array")
    source_lang: Optional[str] = AUTO_LANG
    target_lang: Optional[str] = None


class TranslationDetailOut(CamelModel):
    """translation_details の 1 行（列名のまま返す）"""
    model_config = ConfigDict(alias_generator=None, populate_by_name=True)

    json_key: str
    original_value: str
    translated_value: Optional[str] = None
    status: DetailStatus
    error_message: Optional[str] = None
    translation_time_ms: Optional[int] = None


class Statistics(CamelModel):
    total_keys: int
    translated_keys: int
    failed_keys: int
    skipped_keys: int = 0
    processing_time_ms: int
    average_time_per_key: float


class TranslateResponse(CamelModel):
    success: bool = True
    translation_id: int
    session_id: str
    translated_json: Any
    statistics: Statistics
    details: List[TranslationDetailOut] = []
    warning: Optional[str] = None


class TranslationSummary(CamelModel):
    """履歴一覧の 1 行（DB 列名のまま）"""
    model_config = ConfigDict(alias_generator=None, populate_by_name=True)

    id: int
    session_id: str
    source_language: str
    target_language: str
    total_keys: int
    translated_keys: int
    failed_keys: int
    processing_time_ms: int
    status: RunStatus
    created_at: Optional[datetime] = None


class TranslationList(CamelModel):
    translations: List[TranslationSummary]
    total: int


class TranslationRecord(TranslationSummary):
    original_json: str
    translated_json: str
    error_message: Optional[str] = None
    updated_at: Optional[datetime] = None


class StatsSummary(CamelModel):
    total_keys: int
    translated_keys: int
    failed_keys: int
    success_rate: float
    processing_time_ms: int
    average_time_per_key: float


class TranslationStats(CamelModel):
    translation: TranslationRecord
    details: List[TranslationDetailOut]
    summary: StatsSummary
