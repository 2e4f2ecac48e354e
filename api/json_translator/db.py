# api/json_translator/db.py
import logging
from functools import lru_cache
from typing import Generator, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import sessionmaker, Session as SASession

from json_translator.config import settings

logger = logging.getLogger(__name__)


def make_engine(url: str) -> Engine:
    """
    接続URLから Engine を作る。
    sqlite はプール設定を渡さない（SingletonThreadPool / StaticPool が max_overflow を受け付けない）。
    """
    if make_url(url).get_backend_name() == "sqlite":
        # async ルートから同期 Session を触るので同一スレッド制約を外す
        return create_engine(url, connect_args={"check_same_thread": False})
    return create_engine(
        url,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=5,
        pool_recycle=1800,
    )


@lru_cache
def get_engine() -> Engine:
    url = settings.SQLALCHEMY_URL
    # ログ用にパスワードは伏せる
    logger.info("DB connecting to %s", make_url(url).render_as_string(hide_password=True))
    return make_engine(url)


@lru_cache
def _session_factory() -> sessionmaker:
    # expire_on_commit=False を推奨（コミット後も参照しやすい）
    return sessionmaker(bind=get_engine(), autoflush=False, autocommit=False, expire_on_commit=False)


def get_session() -> Generator[SASession, None, None]:
    """
    FastAPI の Depends 用：リクエスト毎に 1 セッション。
    成功で commit / 失敗で rollback。
    """
    db: SASession = _session_factory()()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


# alias: ルーター側で from json_translator.db import Session として使えるように
Session = SASession


def init_schema(engine: Engine) -> None:
    """translations / translation_details を作成（既存なら何もしない）"""
    from json_translator.repos.tables import metadata

    metadata.create_all(engine)
    logger.info("DB schema ensured (translations, translation_details)")


def ping(engine: Optional[Engine] = None) -> bool:
    """DB到達性の簡易チェック"""
    try:
        with (engine or get_engine()).connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.warning("DB ping failed: %s", e)
        return False


__all__ = [
    "make_engine",
    "get_engine",
    "Session",
    "get_session",
    "init_schema",
    "ping",
]
