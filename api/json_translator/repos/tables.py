# api/json_translator/repos/tables.py
# translations（1 run = 1 行）と translation_details（1 leaf = 1 行）
from __future__ import annotations

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    func,
)

metadata = MetaData()

RUN_STATUSES = ("in_progress", "completed", "failed")
DETAIL_STATUSES = ("success", "failed", "skipped")

translations = Table(
    "translations",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("session_id", String(64), nullable=False),
    Column("source_language", String(16), nullable=False),
    Column("target_language", String(16), nullable=False),
    Column("original_json", Text, nullable=False),
    # begin() 時点では '' のプレースホルダ
    Column("translated_json", Text, nullable=False, server_default=""),
    Column("total_keys", Integer, nullable=False, server_default="0"),
    Column("translated_keys", Integer, nullable=False, server_default="0"),
    # failed + skipped
    Column("failed_keys", Integer, nullable=False, server_default="0"),
    Column("processing_time_ms", Integer, nullable=False, server_default="0"),
    Column("status", String(16), nullable=False, server_default="in_progress"),
    Column("error_message", Text),
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    Column("updated_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    CheckConstraint(
        "status IN ('in_progress', 'completed', 'failed')", name="ck_translations_status"
    ),
)

translation_details = Table(
    "translation_details",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("translation_id", Integer, ForeignKey("translations.id", ondelete="CASCADE"), nullable=False),
    Column("json_key", Text, nullable=False),
    Column("original_value", Text, nullable=False),
    Column("translated_value", Text),
    Column("status", String(16), nullable=False),
    Column("error_message", Text),
    Column("translation_time_ms", Integer),
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    CheckConstraint(
        "status IN ('success', 'failed', 'skipped')", name="ck_translation_details_status"
    ),
)

Index("idx_translations_session_id", translations.c.session_id)
Index("idx_translations_created_at", translations.c.created_at)
Index("idx_translation_details_translation_id", translation_details.c.translation_id)
Index("idx_translation_details_status", translation_details.c.status)
