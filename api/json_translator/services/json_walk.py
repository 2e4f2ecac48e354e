# api/json_translator/services/json_walk.py
# JSON の文字列 leaf 抽出と、path → 訳文 マップからの再構築
# - path 規則: object は ".key"（ルート直下は "key"）、array は "[i]"
#   key が空、または . [ ] を含むときは ["key"]（JSON 文字列）で書く。別の leaf と path が重ならない
# - extract_strings / rebuild は必ず同じ規則で path を作る（lookup がずれないように）
from __future__ import annotations

import json
import re
from typing import Any, Dict, List, Mapping, Tuple

JsonValue = Any
Leaf = Tuple[str, str]


_NEEDS_QUOTE = re.compile(r"[.\[\]]")


def join_path(parent: str, key: str) -> str:
    if not key or _NEEDS_QUOTE.search(key):
        return f"{parent}[{json.dumps(key, ensure_ascii=False)}]"
    return f"{parent}.{key}" if parent else key


def index_path(parent: str, index: int) -> str:
    return f"{parent}[{index}]"


def extract_strings(value: JsonValue) -> List[Leaf]:
    """
    深さ優先で (path, text) を列挙する。
    配列は index 昇順、object はキーの反復順。str 以外の primitive と空コンテナは何も出さない。
    """
    out: List[Leaf] = []
    _extract(value, "", out)
    return out


def _extract(value: JsonValue, path: str, out: List[Leaf]) -> None:
    if isinstance(value, str):
        out.append((path, value))
    elif isinstance(value, list):
        for i, item in enumerate(value):
            _extract(item, index_path(path, i), out)
    elif isinstance(value, dict):
        for key, item in value.items():
            _extract(item, join_path(path, str(key)), out)


def count_string_leaves(value: JsonValue) -> int:
    if isinstance(value, str):
        return 1
    if isinstance(value, list):
        return sum(count_string_leaves(v) for v in value)
    if isinstance(value, dict):
        return sum(count_string_leaves(v) for v in value.values())
    return 0


def rebuild(original: JsonValue, translations_by_path: Mapping[str, str]) -> JsonValue:
    """
    original を辿り直して新しい値を作る（original は変更しない）。
    path に訳があればそれ、無ければ原文のまま。コンテナは常に新規に確保する。
    """
    return _rebuild(original, translations_by_path, "")


def _rebuild(value: JsonValue, tmap: Mapping[str, str], path: str) -> JsonValue:
    if isinstance(value, str):
        return tmap.get(path, value)
    if isinstance(value, list):
        return [_rebuild(item, tmap, index_path(path, i)) for i, item in enumerate(value)]
    if isinstance(value, dict):
        result: Dict[str, JsonValue] = {}
        for key, item in value.items():
            result[key] = _rebuild(item, tmap, join_path(path, str(key)))
        return result
    # 数値 / bool / None はそのまま
    return value
