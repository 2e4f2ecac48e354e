# api/json_translator/routers/languages.py
from fastapi import APIRouter

from json_translator.schemas.common import LanguageList

router = APIRouter(tags=["Languages"])

# UI のセレクトボックス用（source には別途 "auto" が付く）
SUPPORTED_LANGUAGES = [
    {"code": "en", "name": "English"},
    {"code": "es", "name": "Español"},
    {"code": "fr", "name": "Français"},
    {"code": "de", "name": "Deutsch"},
    {"code": "it", "name": "Italiano"},
    {"code": "pt", "name": "Português"},
    {"code": "ru", "name": "Русский"},
    {"code": "ja", "name": "日本語"},
    {"code": "ko", "name": "한국어"},
    {"code": "zh", "name": "中文"},
    {"code": "ar", "name": "العربية"},
    {"code": "hi", "name": "हिन्दी"},
    {"code": "nl", "name": "Nederlands"},
    {"code": "sv", "name": "Svenska"},
    {"code": "pl", "name": "Polski"},
]


@router.get("/languages", response_model=LanguageList, summary="対応言語一覧")
def list_languages():
    return {"languages": SUPPORTED_LANGUAGES}
