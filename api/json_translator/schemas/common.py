from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from typing import List, Optional

# 言語コードは固定リスト（/languages）。source は "auto" も可。
AUTO_LANG = "auto"


class CamelModel(BaseModel):
    """API の入出力は camelCase（translationId など）、Python 側は snake_case"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Language(BaseModel):
    code: str
    name: str


class LanguageList(BaseModel):
    languages: List[Language]


class Problem(BaseModel):
    error: str
    message: str
    suggestion: Optional[str] = None
