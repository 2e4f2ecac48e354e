from fastapi.responses import JSONResponse

from json_translator.repos.errors import RepoError
from json_translator.services.errors import TranslatorError


def to_problem(e: Exception) -> JSONResponse:
    """例外 → {error, message, suggestion?}（HTTP ステータスは例外クラスが持つ）"""
    if isinstance(e, TranslatorError):
        return JSONResponse(status_code=e.status_code, content=e.to_dict())
    if isinstance(e, RepoError):
        return JSONResponse(status_code=e.status_code, content={"error": e.title, "message": str(e)})
    return JSONResponse(status_code=500, content={"error": "Internal", "message": str(e)})
