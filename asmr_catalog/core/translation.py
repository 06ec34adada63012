"""
Batched machine translation of titles and subtitle lines.

The translation endpoint caps the size of a single request, so large batches
are split into newline-joined chunks, translated concurrently and zipped back
onto the original strings. Any loss of 1:1 correspondence is a failure: a
shifted subtitle line is worse than an untranslated one.
"""

from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import replace
from typing import Dict, List, Optional, Sequence

from asmr_catalog.core.api.base import APIError
from asmr_catalog.core.api.contracts.translation import TranslationTransport
from asmr_catalog.core.cache import TimeBasedLRUCache, make_fingerprint
from asmr_catalog.core.dto.lyrics import LyricsItemDTO, TimedLyricsDTO
from asmr_catalog.core.dto.media_tree import Folder
from asmr_catalog.core.dto.work import WorkDTO
from asmr_catalog.core.media_tree import apply_translations, get_all_titles


MAX_REQUEST_LENGTH = 1800
CHUNK_SEPARATOR = "\n"

_LEADING_TAG = re.compile(r"^([\[【][^\]】]*[\]】])")

logger = logging.getLogger(__name__)


class TranslationError(RuntimeError):
    """Raised when a batch cannot be translated with exact item correspondence."""


class ChunkingIntegrityError(TranslationError):
    """Chunks do not cover the input list."""


class TranslationMismatchError(TranslationError):
    """A translated chunk did not split back into the expected item count."""


class TranslationTransportError(TranslationError):
    """The transport failed for at least one chunk."""


# ------------------------------------------------------------------
# Pure helpers
# ------------------------------------------------------------------

def move_first_group_to_end(text: str) -> str:
    """Move a leading "[...]" or "【...】" tag to the end of the string."""
    match = _LEADING_TAG.match(text)
    if match is None:
        return text
    tag = match.group(1)
    return text[len(tag):] + tag


def _joined_length(items: Sequence[str]) -> int:
    return sum(len(item) for item in items) + max(len(items) - 1, 0)


def split_into_chunks(items: Sequence[str], max_length: int = MAX_REQUEST_LENGTH) -> List[List[str]]:
    """
    Greedy split of `items` into newline-joinable chunks of at most
    `max_length` characters. Items are never split; an item longer than the
    budget travels alone.

    A trailing chunk holding fewer than a third of the items of the chunk
    before it is merged with that chunk and re-split near the midpoint.
    """
    items = list(items)
    if not items:
        return []
    if _joined_length(items) <= max_length:
        return [items]

    chunks: List[List[str]] = []
    current: List[str] = []
    current_length = 0

    for item in items:
        # +1 for the separator added when joining
        item_length = len(item) + (1 if current else 0)
        if current and current_length + item_length > max_length:
            chunks.append(current)
            current = []
            current_length = 0
            item_length = len(item)
        current.append(item)
        current_length += item_length

    if current:
        chunks.append(current)

    if len(chunks) > 1:
        last = chunks[-1]
        second_last = chunks[-2]
        if len(last) * 3 < len(second_last):
            rebalanced = _rebalance(second_last + last, max_length)
            if rebalanced is not None:
                chunks[-2:] = rebalanced

    return chunks


def _rebalance(combined: List[str], max_length: int) -> Optional[List[List[str]]]:
    half = len(combined) // 2
    split_index = 0
    first_length = 0
    for i, item in enumerate(combined):
        item_length = len(item) + (1 if i > 0 else 0)
        if i >= half or first_length + item_length > max_length:
            split_index = i
            break
        first_length += item_length

    first, second = combined[:split_index], combined[split_index:]
    if not first or not second or _joined_length(second) > max_length:
        return None
    return [first, second]


# ------------------------------------------------------------------
# Batcher
# ------------------------------------------------------------------

class TranslationBatcher:
    """
    Translates string batches through a size limited transport.

    Finished mappings are cached by a fingerprint of the input list. The
    cache object is owned by the caller and shared by reference.
    """

    def __init__(
        self,
        transport: TranslationTransport,
        cache: TimeBasedLRUCache[Dict[str, str]],
        *,
        max_length: int = MAX_REQUEST_LENGTH,
    ):
        self._transport = transport
        self._cache = cache
        self._max_length = max_length

    async def translate_text(self, text: str, target_lang: str) -> str:
        """Single string, single request. Transport errors propagate."""
        translated = await self._transport.translate(text, target_lang)
        return move_first_group_to_end(translated)

    async def translate_list(
        self,
        items: Sequence[str],
        target_lang: str,
        *,
        hard_fail: bool = False,
    ) -> Optional[Dict[str, str]]:
        """
        Map every string in `items` to its translation.

        With `hard_fail` any chunking, transport or count mismatch raises a
        TranslationError; otherwise it is logged and None is returned so the
        caller can keep the untranslated text.
        """
        items = list(items)
        if not items:
            return {}

        cache_key = make_fingerprint([target_lang, CHUNK_SEPARATOR, *items])
        cached = self._cache.get(cache_key)
        if cached is not None and all(item in cached for item in items):
            logger.debug(f"Translation cache hit ({len(items)} items)")
            return dict(cached)

        try:
            result = await self._translate_uncached(items, target_lang)
        except TranslationError as e:
            if hard_fail:
                raise
            logger.warning(f"Translation skipped: {e}")
            return None

        # callers own their mapping; the cached one is never handed out
        self._cache.put(cache_key, dict(result))
        return result

    async def _translate_uncached(self, items: List[str], target_lang: str) -> Dict[str, str]:
        # newlines inside an item would break the split-back step
        chunks = split_into_chunks(
            [item.replace("\n", " ") for item in items],
            self._max_length,
        )
        if sum(len(chunk) for chunk in chunks) != len(items):
            raise ChunkingIntegrityError(
                f"chunks cover {sum(len(c) for c in chunks)} of {len(items)} items"
            )

        logger.debug(f"Translating {len(items)} items in {len(chunks)} chunk(s) to {target_lang}")

        # join every chunk before judging any of them
        responses = await asyncio.gather(
            *(self._translate_chunk(chunk, target_lang) for chunk in chunks),
            return_exceptions=True,
        )
        for response in responses:
            if isinstance(response, BaseException):
                raise response

        translated: List[str] = []
        for index, (chunk, response) in enumerate(zip(chunks, responses)):
            parts = response.split(CHUNK_SEPARATOR)
            if len(parts) != len(chunk):
                logger.debug(f"Chunk {index} original: {chunk}")
                logger.debug(f"Chunk {index} translated: {parts}")
                raise TranslationMismatchError(
                    f"chunk {index} expected {len(chunk)} items, got {len(parts)}"
                )
            translated.extend(parts)

        if len(translated) != len(items):
            raise TranslationMismatchError(
                f"expected {len(items)} items, got {len(translated)}"
            )

        return {
            original: move_first_group_to_end(text)
            for original, text in zip(items, translated)
        }

    async def _translate_chunk(self, chunk: List[str], target_lang: str) -> str:
        try:
            return await self._transport.translate(CHUNK_SEPARATOR.join(chunk), target_lang)
        except APIError as e:
            raise TranslationTransportError(f"chunk failed to translate: {e}") from e

    # ------------------------------------------------------------------
    # Content helpers
    # ------------------------------------------------------------------

    async def translate_tree(self, tree: Folder, target_lang: str) -> Folder:
        """Rewrite every title of a caller-owned tree; untranslated on failure."""
        mapping = await self.translate_list(get_all_titles(tree), target_lang)
        if mapping:
            apply_translations(tree, mapping)
        return tree

    async def translate_works(self, works: Sequence[WorkDTO], target_lang: str) -> List[WorkDTO]:
        works = list(works)
        texts = [w.title for w in works] + [w.name for w in works]
        mapping = await self.translate_list(texts, target_lang)
        if not mapping:
            return works
        return [
            replace(
                w,
                title=mapping.get(w.title, w.title),
                name=mapping.get(w.name, w.name),
            )
            for w in works
        ]

    async def translate_lyrics(self, lyrics: TimedLyricsDTO, target_lang: str) -> TimedLyricsDTO:
        """Subtitle translation fails hard: a partial result would misalign cues."""
        mapping = await self.translate_list(
            [item.text for item in lyrics.items],
            target_lang,
            hard_fail=True,
        )
        if not mapping:
            return lyrics
        return TimedLyricsDTO(
            items=[
                LyricsItemDTO(
                    text=mapping.get(item.text, item.text),
                    start_ms=item.start_ms,
                    end_ms=item.end_ms,
                )
                for item in lyrics.items
            ]
        )
