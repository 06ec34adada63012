import asyncio

import pytest

from asmr_catalog.core.api.base import APIError
from asmr_catalog.core.dto.lyrics import LyricsItemDTO, TimedLyricsDTO
from asmr_catalog.core.dto.work import WorkDTO
from asmr_catalog.core.media_tree import build_tree
from asmr_catalog.core.translation import (
    MAX_REQUEST_LENGTH,
    TranslationMismatchError,
    TranslationTransportError,
    TranslationBatcher,
    move_first_group_to_end,
    split_into_chunks,
)


def _joined(chunk):
    return "\n".join(chunk)


# ------------------------------------------------------------------
# Chunking
# ------------------------------------------------------------------

def test_small_batch_is_single_chunk():
    items = ["a", "b", "c"]
    assert split_into_chunks(items) == [items]


def test_empty_batch_has_no_chunks():
    assert split_into_chunks([]) == []


def test_five_long_titles_make_at_least_three_chunks():
    items = [c * 800 for c in "abcde"]
    chunks = split_into_chunks(items)

    assert len(chunks) >= 3
    assert [item for chunk in chunks for item in chunk] == items
    assert all(len(_joined(chunk)) <= MAX_REQUEST_LENGTH for chunk in chunks)


def test_chunks_preserve_order_and_budget():
    items = [f"title {i} " + "x" * (i % 37) for i in range(400)]
    chunks = split_into_chunks(items)

    assert len(chunks) > 1
    assert [item for chunk in chunks for item in chunk] == items
    assert all(len(_joined(chunk)) <= MAX_REQUEST_LENGTH for chunk in chunks)


def test_oversized_item_travels_alone():
    items = ["short", "y" * 2000, "tail"]
    chunks = split_into_chunks(items)
    assert ["y" * 2000] in chunks
    assert [item for chunk in chunks for item in chunk] == items


def test_small_trailing_chunk_is_rebalanced():
    # greedy packing gives 10 items then a lone tail item
    items = ["z" * 99] * 11
    chunks = split_into_chunks(items, max_length=1000)

    assert [len(c) for c in chunks] == [5, 6]
    assert [item for chunk in chunks for item in chunk] == items


def test_move_first_group_to_end():
    assert move_first_group_to_end("[Binaural] Healing") == " Healing[Binaural]"
    assert move_first_group_to_end("【KU100】Ear cleaning") == "Ear cleaning【KU100】"
    assert move_first_group_to_end("Plain title") == "Plain title"


def test_move_first_group_to_end_is_idempotent_on_untagged():
    once = move_first_group_to_end("[Tag] body")
    assert move_first_group_to_end(once) == once


# ------------------------------------------------------------------
# Batcher
# ------------------------------------------------------------------

def test_empty_list_makes_no_request(batcher, transport):
    assert asyncio.run(batcher.translate_list([], "en")) == {}
    assert transport.calls == []


def test_translate_list_maps_every_distinct_item(batcher, transport):
    items = ["一", "二", "一"]
    result = asyncio.run(batcher.translate_list(items, "en"))

    assert len(result) == len(set(items))
    assert result["一"] == "<en>一"
    assert len(transport.calls) == 1
    assert transport.calls[0] == ("一\n二\n一", "en")


def test_repeat_call_is_served_from_cache(batcher, transport):
    items = ["a", "b"]
    first = asyncio.run(batcher.translate_list(items, "en"))
    second = asyncio.run(batcher.translate_list(items, "en"))

    assert first == second
    assert len(transport.calls) == 1


def test_cache_is_per_target_language(batcher, transport):
    asyncio.run(batcher.translate_list(["a"], "en"))
    result = asyncio.run(batcher.translate_list(["a"], "fr"))

    assert result == {"a": "<fr>a"}
    assert len(transport.calls) == 2


def test_chunks_are_dispatched_and_reassembled_in_order(batcher, transport):
    items = [f"{i:03d}" + "q" * 300 for i in range(20)]
    result = asyncio.run(batcher.translate_list(items, "en"))

    assert len(transport.calls) > 1
    assert all(len(text) <= MAX_REQUEST_LENGTH for text, _ in transport.calls)
    assert all(result[item] == f"<en>{item}" for item in items)


def test_embedded_newlines_do_not_break_mapping(batcher, transport):
    result = asyncio.run(batcher.translate_list(["line one\nline two", "b"], "en"))

    assert result == {"line one\nline two": "<en>line one line two", "b": "<en>b"}


def test_translated_values_are_normalized(make_transport, translation_cache):
    transport = make_transport(lambda text, lang: "[SFW] Healing\nSleep")
    batcher = TranslationBatcher(transport, translation_cache)

    result = asyncio.run(batcher.translate_list(["a", "b"], "en"))
    assert result == {"a": " Healing[SFW]", "b": "Sleep"}


def test_count_mismatch_soft_fails(make_transport, translation_cache):
    transport = make_transport(lambda text, lang: "merged line")
    batcher = TranslationBatcher(transport, translation_cache)

    assert asyncio.run(batcher.translate_list(["a", "b"], "en")) is None
    assert len(translation_cache) == 0


def test_count_mismatch_hard_fails(make_transport, translation_cache):
    transport = make_transport(lambda text, lang: "merged line")
    batcher = TranslationBatcher(transport, translation_cache)

    with pytest.raises(TranslationMismatchError):
        asyncio.run(batcher.translate_list(["a", "b"], "en", hard_fail=True))


def test_transport_failure(batcher, transport):
    transport.fail_with = APIError("HTTP 429")

    assert asyncio.run(batcher.translate_list(["a"], "en")) is None
    with pytest.raises(TranslationTransportError):
        asyncio.run(batcher.translate_list(["a"], "en", hard_fail=True))


def test_translate_text_uses_one_request(make_transport, translation_cache):
    transport = make_transport(lambda text, lang: "[R18] translated")
    batcher = TranslationBatcher(transport, translation_cache)

    assert asyncio.run(batcher.translate_text("[R18] title", "en")) == " translated[R18]"
    assert transport.calls == [("[R18] title", "en")]


# ------------------------------------------------------------------
# Content helpers
# ------------------------------------------------------------------

def test_translate_tree_rewrites_titles(batcher, raw_tracks):
    tree = build_tree(raw_tracks)
    asyncio.run(batcher.translate_tree(tree, "en"))

    wav = tree.children[0]
    assert wav.title == "<en>WAV"
    assert wav.untranslated_title == "WAV"
    assert tree.title == "root"


def test_translate_tree_keeps_titles_on_failure(batcher, transport, raw_tracks):
    transport.fail_with = APIError("down")
    tree = build_tree(raw_tracks)
    asyncio.run(batcher.translate_tree(tree, "en"))
    assert tree.children[0].title == "WAV"


def _work(work_id, title, name):
    return WorkDTO(
        id=work_id,
        title=title,
        circle_id=1,
        name=name,
        nsfw=False,
        release="2024-01-01",
        has_subtitle=True,
    )


def test_translate_works_translates_title_and_circle(batcher, transport):
    works = [_work(1, "タイトル", "サークル")]
    result = asyncio.run(batcher.translate_works(works, "en"))

    assert result[0].title == "<en>タイトル"
    assert result[0].name == "<en>サークル"
    assert works[0].title == "タイトル"
    assert len(transport.calls) == 1


def test_translate_lyrics_keeps_timing(batcher):
    lyrics = TimedLyricsDTO(items=[
        LyricsItemDTO(text="こんにちは", start_ms=0, end_ms=1000),
        LyricsItemDTO(text="さようなら", start_ms=1000, end_ms=2500),
    ])
    result = asyncio.run(batcher.translate_lyrics(lyrics, "en"))

    assert [i.text for i in result.items] == ["<en>こんにちは", "<en>さようなら"]
    assert [(i.start_ms, i.end_ms) for i in result.items] == [(0, 1000), (1000, 2500)]


def test_translate_lyrics_fails_hard(make_transport, translation_cache):
    transport = make_transport(lambda text, lang: "only one line")
    batcher = TranslationBatcher(transport, translation_cache)
    lyrics = TimedLyricsDTO(items=[
        LyricsItemDTO(text="a", start_ms=0, end_ms=1),
        LyricsItemDTO(text="b", start_ms=1, end_ms=2),
    ])
    with pytest.raises(TranslationMismatchError):
        asyncio.run(batcher.translate_lyrics(lyrics, "en"))


def test_mutating_a_result_leaves_the_cache_intact(batcher, transport):
    first = asyncio.run(batcher.translate_list(["a", "b"], "en"))
    first["a"] = "edited"

    second = asyncio.run(batcher.translate_list(["a", "b"], "en"))

    assert second == {"a": "<en>a", "b": "<en>b"}
    assert second is not first
    assert len(transport.calls) == 1


class SlowFirstChunkTransport:
    """Delays the first payload so later chunks finish before it."""

    def __init__(self):
        self.in_flight = 0
        self.peak = 0
        self.completed = []
        self._first = True

    async def translate(self, text, target_lang):
        self.in_flight += 1
        self.peak = max(self.peak, self.in_flight)
        delay = 0.05 if self._first else 0
        self._first = False
        await asyncio.sleep(delay)
        self.in_flight -= 1
        self.completed.append(text)
        return "\n".join(f"<{target_lang}>{line}" for line in text.split("\n"))


def test_chunks_run_concurrently_and_keep_input_order(translation_cache):
    transport = SlowFirstChunkTransport()
    batcher = TranslationBatcher(transport, translation_cache)
    items = [f"{i:03d}" + "q" * 300 for i in range(20)]

    result = asyncio.run(batcher.translate_list(items, "en"))

    assert transport.peak > 1
    assert transport.completed[-1].startswith("000")
    assert list(result.values()) == [f"<en>{item}" for item in items]
