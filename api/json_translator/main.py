from __future__ import annotations

import logging

from fastapi import FastAPI, Request, Response
from fastapi import status as http_status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse

from json_translator.config import settings
from json_translator.db import get_engine, init_schema, ping
from json_translator.logger import setup_logging
from json_translator.repos.errors import RepoError
from json_translator.routers import languages, status, translate
from json_translator.routers._helpers import to_problem
from json_translator.services.errors import TranslatorError
from json_translator.ui import render_index

setup_logging(settings.LOG_LEVEL)
log = logging.getLogger(__name__)

app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    docs_url="/docs",
    openapi_url="/openapi.json",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---- startup（設定ログ + スキーマ作成） ----
@app.on_event("startup")
def _startup() -> None:
    log.info(
        "[startup] TRANSLATE: provider=%s model=%s max_keys=%s translated=%s batch=%s delay_ms=%s timeout_s=%s",
        settings.TRANSLATE_PROVIDER,
        settings.OPENAI_MODEL,
        settings.MAX_STRING_KEYS,
        settings.MAX_TRANSLATED_KEYS,
        settings.BATCH_SIZE,
        settings.BATCH_DELAY_MS,
        settings.TRANSLATE_TIMEOUT_S,
    )
    if settings.TRANSLATE_PROVIDER == "openai":
        log.info("[startup] OPENAI_API_KEY: %s", "SET" if settings.OPENAI_API_KEY else "NOT SET")
    if settings.DB_AUTO_CREATE:
        init_schema(get_engine())


# ---- エラー → {error, message, suggestion?} ----
@app.exception_handler(TranslatorError)
async def _translator_error(request: Request, exc: TranslatorError):
    return to_problem(exc)


@app.exception_handler(RepoError)
async def _repo_error(request: Request, exc: RepoError):
    return to_problem(exc)


@app.exception_handler(Exception)
async def _unhandled_error(request: Request, exc: Exception):
    # 想定外の例外も JSON の {error, message} で返す（素の text/plain 500 にしない）
    log.exception("unhandled error on %s %s", request.method, request.url.path)
    return to_problem(exc)


@app.exception_handler(RequestValidationError)
async def _validation_error(request: Request, exc: RequestValidationError):
    # 欠落・型違いは 422 ではなく 400 で返す
    first = exc.errors()[0] if exc.errors() else {}
    loc = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    message = f"{loc}: {first.get('msg')}" if loc else str(first.get("msg", "Invalid request"))
    return JSONResponse(status_code=400, content={"error": "Invalid input", "message": message})


# ---- root / health ----
@app.get("/", include_in_schema=False, response_class=HTMLResponse)
def root():
    return render_index(settings.API_PREFIX, settings.MAX_STRING_KEYS, settings.MAX_TRANSLATED_KEYS)


@app.get("/healthz")
def healthz():
    return {"ok": True}


@app.get("/livez")
def livez():
    return {"ok": True}


@app.get("/startupz")
def startupz():
    if ping():
        return {"db": "ok"}
    return Response(content="db unreachable", status_code=http_status.HTTP_503_SERVICE_UNAVAILABLE)


# ==== ルーター登録（API_PREFIX 配下） ====
for _module in (translate, languages, status):
    app.include_router(_module.router, prefix=settings.API_PREFIX)
    log.debug("included router: %s (prefix=%s)", _module.__name__, settings.API_PREFIX)
