# api/json_translator/config.py
from functools import lru_cache
from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import computed_field
from sqlalchemy.engine import URL, make_url
import logging


class Settings(BaseSettings):
    """
    アプリ全体の設定。
    - DB 接続（DATABASE_URL 優先、無ければ DB_* から PostgreSQL URL を合成）
    - 翻訳プロバイダ（openai|dummy）
    - パイプラインの上限値・バッチ・タイムアウト
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # 基本情報
    APP_NAME: str = "JSON Translator API"
    APP_ENV: str = "dev"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"
    API_PREFIX: str = "/api"
    CORS_ORIGINS: List[str] = ["*"]

    # === DB 接続 ===
    # ローカル等で丸ごと使う場合のみ（sqlite:///./translations.db なども可）。
    DATABASE_URL: Optional[str] = None

    DB_HOST: str = "postgres"
    DB_PORT: int = 5432
    DB_NAME: str = "jsontranslator"
    DB_USER: str = "dev"
    DB_PASSWORD: str = "dev"  # ※ 本番は Secret で
    # 起動時に translations / translation_details を CREATE IF NOT EXISTS
    DB_AUTO_CREATE: bool = True

    # === 翻訳プロバイダ ===
    TRANSLATE_PROVIDER: str = "dummy"  # openai|dummy
    OPENAI_API_KEY: Optional[str] = None
    OPENAI_MODEL: str = "gpt-4o-mini"
    OPENAI_BASE_URL: Optional[str] = None  # Noneなら公式
    OPENAI_TIMEOUT_S: float = 20.0

    # === パイプライン ===
    MAX_STRING_KEYS: int = 50        # これを超えたら即 400（バックエンド呼び出しなし）
    MAX_TRANSLATED_KEYS: int = 20    # 1 run で実際に翻訳する件数。残りは skipped
    BATCH_SIZE: int = 5
    BATCH_DELAY_MS: int = 1000       # バッチ間の固定ウェイト（RateLimit 緩和）
    TRANSLATE_TIMEOUT_S: float = 25.0
    MAX_TEXT_LENGTH: int = 1000      # 超過分は切り詰めて末尾に …
    HISTORY_LIMIT: int = 50

    # 内部ヘルパー：最終的な SQLAlchemy URL を URL オブジェクトで返す
    def _normalized_database_url(self) -> URL:
        # 1) 明示された DATABASE_URL があれば（空文字は無効）まず検討
        raw = (self.DATABASE_URL or "").strip()
        if raw:
            u = make_url(raw)
            if u.get_backend_name() == "postgresql":
                u = u.set(drivername="postgresql+psycopg2")
                # マスク（'***'）や未設定パスワードなら不採用
                if u.password in (None, "", "***"):
                    raise ValueError("DATABASE_URL has no usable password.")
            return u

        # 2) DB_* から生成（既定の挙動）
        if self.DB_PASSWORD in (None, "", "***"):
            raise ValueError("DB_PASSWORD is not set or is a placeholder ('***').")

        return URL.create(
            "postgresql+psycopg2",
            username=self.DB_USER,
            password=self.DB_PASSWORD,
            host=self.DB_HOST,
            port=self.DB_PORT,
            database=self.DB_NAME,
        )

    @computed_field
    @property
    def SQLALCHEMY_URL(self) -> str:
        """
        SQLAlchemy に渡す接続文字列。
        パスワードを必ず含めるため render_as_string(hide_password=False) を使用。
        """
        return self._normalized_database_url().render_as_string(hide_password=False)

    @property
    def BATCH_DELAY_S(self) -> float:
        return self.BATCH_DELAY_MS / 1000.0


@lru_cache
def get_settings() -> Settings:
    s = Settings()
    # 起動時ログ：主要設定を出力（キーやシークレットは出さない）
    logger = logging.getLogger("json_translator.config")
    logger.info(
        "Translate: provider=%s model=%s | limits: max_keys=%s translated=%s batch=%s delay_ms=%s timeout_s=%s",
        s.TRANSLATE_PROVIDER,
        s.OPENAI_MODEL,
        s.MAX_STRING_KEYS,
        s.MAX_TRANSLATED_KEYS,
        s.BATCH_SIZE,
        s.BATCH_DELAY_MS,
        s.TRANSLATE_TIMEOUT_S,
    )
    return s


# `from json_translator.config import settings` で参照できるように
settings = get_settings()
