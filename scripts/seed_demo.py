#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Seed the history tables with two demo runs (development only).
- demo-session-1: en -> es
- demo-session-2: es -> fr
Skips when the translations table already has rows.

Usage:
  DATABASE_URL=sqlite:///./translations.db python3 scripts/seed_demo.py
"""

from __future__ import annotations

import json
import sys

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from json_translator.db import get_engine, init_schema
from json_translator.repos.tables import translations
from json_translator.repos.translation_repo import TranslationRepo
from json_translator.services.translate import PipelineStatistics, TranslationDetail

DEMO_RUNS = [
    {
        "session_id": "demo-session-1",
        "source_lang": "en",
        "target_lang": "es",
        "original": {"welcome": "Welcome", "goodbye": "Goodbye"},
        "translated": {"welcome": "Bienvenido", "goodbye": "Adiós"},
        "processing_time_ms": 1500,
    },
    {
        "session_id": "demo-session-2",
        "source_lang": "es",
        "target_lang": "fr",
        "original": {"hola": "Hola mundo", "gracias": "Gracias"},
        "translated": {"hola": "Bonjour le monde", "gracias": "Merci"},
        "processing_time_ms": 1200,
    },
]


def seed(session: Session) -> int:
    if session.execute(select(func.count()).select_from(translations)).scalar_one() > 0:
        return 0
    repo = TranslationRepo(session)
    for run in DEMO_RUNS:
        per_key_ms = run["processing_time_ms"] // len(run["original"])
        details = [
            TranslationDetail(key, text, run["translated"][key], "success", None, per_key_ms)
            for key, text in run["original"].items()
        ]
        stats = PipelineStatistics(
            total_keys=len(details),
            translated_keys=len(details),
            failed_keys=0,
            skipped_keys=0,
            processing_time_ms=run["processing_time_ms"],
        )
        tid = repo.begin(
            session_id=run["session_id"],
            source_lang=run["source_lang"],
            target_lang=run["target_lang"],
            original_json=json.dumps(run["original"], ensure_ascii=False),
            total_keys=len(details),
        )
        repo.complete(tid, json.dumps(run["translated"], ensure_ascii=False), stats, details)
    session.commit()
    return len(DEMO_RUNS)


def main() -> int:
    engine = get_engine()
    init_schema(engine)
    with Session(engine) as session:
        n = seed(session)
    print(f"seeded {n} demo runs" if n else "translations not empty; nothing seeded")
    return 0


if __name__ == "__main__":
    sys.exit(main())
