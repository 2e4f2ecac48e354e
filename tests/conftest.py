import asyncio
import os

# settings はモジュール import 時に読まれるので、その前に環境を固定する
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("TRANSLATE_PROVIDER", "dummy")
os.environ.setdefault("DB_AUTO_CREATE", "false")
os.environ.setdefault("BATCH_DELAY_MS", "0")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from json_translator.db import get_session, init_schema
from json_translator.main import app
from json_translator.routers.translate import get_translator
from json_translator.services.backends import Translator


class RecordingTranslator(Translator):
    """呼び出しを記録し "<tgt>:<text>" を返す。fail_on に含まれるテキストは例外。"""
    name = "recording"

    def __init__(self, fail_on=(), delay_s=0.0, result=None):
        self.calls = []
        self.fail_on = set(fail_on)
        self.delay_s = delay_s
        self.result = result

    async def translate(self, text, src, tgt):
        self.calls.append((text, src, tgt))
        if self.delay_s:
            await asyncio.sleep(self.delay_s)
        if text in self.fail_on:
            raise RuntimeError(f"backend down for {text!r}")
        if self.result is not None:
            return self.result
        return f"{tgt}:{text}"


class RecordingSleep:
    def __init__(self):
        self.delays = []

    async def __call__(self, seconds):
        self.delays.append(seconds)


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_schema(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def session(session_factory):
    s = session_factory()
    yield s
    s.close()


@pytest.fixture
def translator():
    return RecordingTranslator()


@pytest.fixture
def client(session_factory, translator):
    def _session():
        s = session_factory()
        try:
            yield s
            s.commit()
        except Exception:
            s.rollback()
            raise
        finally:
            s.close()

    app.dependency_overrides[get_session] = _session
    app.dependency_overrides[get_translator] = lambda: translator
    yield TestClient(app)
    app.dependency_overrides.clear()


def make_doc(n, prefix="text"):
    """文字列 leaf を n 個持つ object"""
    return {f"k{i:02d}": f"{prefix} {i}" for i in range(n)}
