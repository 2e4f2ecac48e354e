"""HTTP API (FastAPI TestClient, in-memory SQLite, recording translator)."""

import json
import threading

import pytest
from conftest import make_doc
from fastapi.testclient import TestClient

from json_translator.config import settings
from json_translator.main import app
from json_translator.repos.translation_repo import TranslationRepo
from json_translator.routers.translate import get_translator
from json_translator.services import translate as translate_service


def post(client, body):
    return client.post("/api/translate", json=body)


class TestTranslate:
    def test_translate_string_payload(self, client, translator):
        res = post(client, {"jsonData": '{"a": "Hello", "b": ["World", 42, null]}', "sourceLang": "en", "targetLang": "es"})
        assert res.status_code == 200
        body = res.json()
        assert body["success"] is True
        assert body["translatedJson"] == {"a": "es:Hello", "b": ["es:World", 42, None]}
        assert body["statistics"]["totalKeys"] == 2
        assert body["statistics"]["translatedKeys"] == 2
        assert body["statistics"]["failedKeys"] == 0
        assert body["statistics"]["skippedKeys"] == 0
        assert body["details"][1]["json_key"] == "b[0]"
        assert body["details"][1]["status"] == "success"
        assert body["warning"] is None
        assert isinstance(body["translationId"], int)
        assert body["sessionId"]

    def test_object_payload_and_default_auto_source(self, client, translator):
        res = post(client, {"jsonData": {"greeting": "Hi"}, "targetLang": "fr"})
        assert res.status_code == 200
        assert translator.calls == [("Hi", None, "fr")]

    def test_run_is_persisted(self, client):
        body = post(client, {"jsonData": {"a": "x", "b": "y"}, "sourceLang": "en", "targetLang": "de"}).json()
        stats = client.get(f"/api/translations/{body['translationId']}/stats").json()

        assert stats["translation"]["status"] == "completed"
        assert json.loads(stats["translation"]["translated_json"]) == {"a": "de:x", "b": "de:y"}
        assert [d["json_key"] for d in stats["details"]] == ["a", "b"]
        assert stats["summary"]["successRate"] == 100.0
        assert stats["summary"]["totalKeys"] == 2

    def test_soft_cap_warning_and_skips(self, client):
        res = post(client, {"jsonData": make_doc(30), "sourceLang": "en", "targetLang": "es"})
        body = res.json()
        assert res.status_code == 200
        assert body["statistics"]["translatedKeys"] == 20
        assert body["statistics"]["skippedKeys"] == 10
        assert body["warning"]
        assert body["translatedJson"]["k29"] == "text 29"

        row = client.get(f"/api/translations/{body['translationId']}/stats").json()["translation"]
        assert row["failed_keys"] == 10

    @pytest.mark.parametrize("body", [
        {"sourceLang": "en", "targetLang": "es"},
        {"jsonData": "", "targetLang": "es"},
        {"jsonData": {"a": "b"}},
        {"jsonData": {"a": "b"}, "targetLang": "  "},
    ])
    def test_missing_fields(self, client, body):
        res = post(client, body)
        assert res.status_code == 400
        assert res.json()["message"] == "JSON data and target language are required"

    def test_invalid_json_text(self, client, translator):
        res = post(client, {"jsonData": '{"a": ', "targetLang": "es"})
        assert res.status_code == 400
        assert res.json()["message"].startswith("Invalid JSON")
        assert translator.calls == []

    def test_over_hard_cap(self, client, translator):
        res = post(client, {"jsonData": make_doc(51), "targetLang": "es"})
        assert res.status_code == 400
        body = res.json()
        assert "51" in body["message"]
        assert body["suggestion"]
        assert translator.calls == []
        assert client.get("/api/translations").json()["total"] == 0

    def test_malformed_body_is_400(self, client):
        res = client.post("/api/translate", content="not json", headers={"Content-Type": "application/json"})
        assert res.status_code == 400

    def test_timeout_is_408_and_run_marked_failed(self, client, translator, monkeypatch):
        translator.delay_s = 1.0
        monkeypatch.setattr(settings, "TRANSLATE_TIMEOUT_S", 0.05)
        res = post(client, {"jsonData": {"a": "slow"}, "targetLang": "es"})
        assert res.status_code == 408
        assert res.json()["suggestion"]

        runs = client.get("/api/translations").json()["translations"]
        assert runs[0]["status"] == "failed"

    def test_rate_limit_message_is_429(self, client, monkeypatch):
        async def boom(*args, **kwargs):
            raise RuntimeError("Error code: 429 - Too Many Requests")

        monkeypatch.setattr(translate_service, "run_pipeline", boom)
        res = post(client, {"jsonData": {"a": "x"}, "targetLang": "es"})
        assert res.status_code == 429
        assert "retry" in res.json()["suggestion"]

    def test_other_unexpected_error_is_500(self, client, monkeypatch):
        async def boom(*args, **kwargs):
            raise RuntimeError("disk on fire")

        monkeypatch.setattr(translate_service, "run_pipeline", boom)
        res = post(client, {"jsonData": {"a": "x"}, "targetLang": "es"})
        assert res.status_code == 500
        assert res.json()["message"] == "disk on fire"

    def test_db_writes_run_off_the_event_loop_thread(self, client, translator, monkeypatch):
        threads = {}
        original_begin = TranslationRepo.begin
        original_complete = TranslationRepo.complete

        def begin(self, **kwargs):
            threads["begin"] = threading.get_ident()
            return original_begin(self, **kwargs)

        def complete(self, *args):
            threads["complete"] = threading.get_ident()
            return original_complete(self, *args)

        async def translate(text, src, tgt):
            threads["loop"] = threading.get_ident()
            return f"{tgt}:{text}"

        monkeypatch.setattr(TranslationRepo, "begin", begin)
        monkeypatch.setattr(TranslationRepo, "complete", complete)
        monkeypatch.setattr(translator, "translate", translate)

        res = post(client, {"jsonData": {"a": "x"}, "targetLang": "es"})
        assert res.status_code == 200
        assert threads["begin"] != threads["loop"]
        assert threads["complete"] != threads["loop"]

    def test_provider_setup_error_is_json_500(self, client):
        def broken_translator():
            raise RuntimeError("OPENAI_API_KEY is not set")

        app.dependency_overrides[get_translator] = broken_translator
        res = TestClient(app, raise_server_exceptions=False).post(
            "/api/translate", json={"jsonData": {"a": "x"}, "targetLang": "es"}
        )
        assert res.status_code == 500
        assert res.headers["content-type"].startswith("application/json")
        assert res.json() == {"error": "Internal", "message": "OPENAI_API_KEY is not set"}


class TestHistory:
    def test_list_newest_first(self, client):
        first = post(client, {"jsonData": {"a": "1"}, "targetLang": "es"}).json()["translationId"]
        second = post(client, {"jsonData": {"a": "2"}, "targetLang": "fr"}).json()["translationId"]
        body = client.get("/api/translations").json()
        assert body["total"] == 2
        assert [t["id"] for t in body["translations"]] == [second, first]
        assert body["translations"][0]["target_language"] == "fr"

    def test_stats_unknown_id_is_404(self, client):
        res = client.get("/api/translations/12345/stats")
        assert res.status_code == 404
        assert "not found" in res.json()["message"]

    def test_status_summary(self, client):
        post(client, {"jsonData": make_doc(22), "targetLang": "es"})
        body = client.get("/api/status/summary").json()
        assert body["translations"] == {"in_progress": 0, "completed": 1, "failed": 0}
        assert body["details"] == {"success": 20, "failed": 0, "skipped": 2}


def test_languages(client):
    langs = client.get("/api/languages").json()["languages"]
    assert len(langs) == 15
    assert {"code": "ja", "name": "日本語"} in langs


def test_index_page(client):
    res = client.get("/")
    assert res.status_code == 200
    assert "JSON Document Translator" in res.text
    assert 'const API = "/api"' in res.text
    assert "viewTranslationDetails" in res.text
    assert '"/translations/" + id + "/stats"' in res.text


def test_health(client):
    assert client.get("/healthz").json() == {"ok": True}
