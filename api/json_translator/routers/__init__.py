# api/json_translator/routers/__init__.py

# ここでは「router を再エクスポート」しません。
# main.py はモジュールを import し、`translate.router` のように参照します。

from . import languages
from . import status
from . import translate

__all__ = [
    "languages",
    "status",
    "translate",
]
