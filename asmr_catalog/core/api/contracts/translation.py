from __future__ import annotations

from typing import Protocol


class TranslationTransport(Protocol):
    # Raises APIError on any transport failure.
    async def translate(self, text: str, target_lang: str) -> str:
        ...
