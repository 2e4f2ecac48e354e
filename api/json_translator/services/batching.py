# api/json_translator/services/batching.py
# 固定サイズのバッチで並列翻訳し、バッチ間に固定ウェイトを入れる（RateLimit 緩和）
from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, List, Sequence, TypeVar

from json_translator.services.backends import BackendAdapter, TextOutcome
from json_translator.services.errors import BatchError

log = logging.getLogger(__name__)

T = TypeVar("T")


def partition(items: Sequence[T], size: int) -> List[List[T]]:
    if size < 1:
        raise ValueError("batch size must be >= 1")
    return [list(items[i:i + size]) for i in range(0, len(items), size)]


class BatchScheduler:
    """
    translate_all(texts) -> 入力と同じ順序の TextOutcome。
    - バッチ内は asyncio.gather で同時実行（完了時間 = 一番遅い呼び出し）
    - バッチ間（最後のバッチの後は除く）に delay_s 待つ。失敗に応じた調整はしない
    - バッチ内の想定外例外は BatchError に包んで上に投げる（run 側で全 leaf failed）
    """

    def __init__(
        self,
        adapter: BackendAdapter,
        *,
        batch_size: int = 5,
        delay_s: float = 1.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.adapter = adapter
        self.batch_size = batch_size
        self.delay_s = delay_s
        self._sleep = sleep

    async def translate_all(self, texts: Sequence[str], source_lang: str, target_lang: str) -> List[TextOutcome]:
        batches = partition(texts, self.batch_size)
        out: List[TextOutcome] = []
        for n, batch in enumerate(batches, start=1):
            try:
                results = await asyncio.gather(
                    *(self.adapter.translate_outcome(t, source_lang, target_lang) for t in batch)
                )
            except Exception as e:
                raise BatchError(f"batch {n}/{len(batches)} failed: {e}") from e
            out.extend(results)
            log.debug("batch %s/%s done (%s texts)", n, len(batches), len(batch))
            if n < len(batches):
                await self._sleep(self.delay_s)
        return out
