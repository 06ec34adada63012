from typing import Callable, List, Optional, Tuple

import pytest

from asmr_catalog.core.cache import TimeBasedLRUCache
from asmr_catalog.core.translation import TranslationBatcher


def _tag_lines(text: str, target_lang: str) -> str:
    return "\n".join(f"<{target_lang}>{line}" for line in text.split("\n"))


class FakeTransport:
    """Records every payload; translates each line unless told otherwise."""

    def __init__(self, translate: Optional[Callable[[str, str], str]] = None):
        self.calls: List[Tuple[str, str]] = []
        self._translate = translate or _tag_lines
        self.fail_with: Optional[Exception] = None

    async def translate(self, text: str, target_lang: str) -> str:
        self.calls.append((text, target_lang))
        if self.fail_with is not None:
            raise self.fail_with
        return self._translate(text, target_lang)


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def translation_cache():
    return TimeBasedLRUCache(1000, name="translation")


@pytest.fixture
def batcher(transport, translation_cache):
    return TranslationBatcher(transport, translation_cache)


@pytest.fixture
def make_transport():
    return FakeTransport



def _file(kind, title, hash_, **extra):
    node = {
        "type": kind,
        "title": title,
        "hash": hash_,
        "work": {"id": 123, "source_id": "RJ123", "source_type": "DLSITE"},
        "workTitle": "Work",
        "mediaStreamUrl": f"https://stream/{hash_}",
        "mediaDownloadUrl": f"https://download/{hash_}",
        "size": 1000,
    }
    node.update(extra)
    return node


@pytest.fixture
def raw_tracks():
    """
    root
      WAV/        (3 audio)
      mp3/        (2 audio + subtitle)
      extras/
        mp3/      (1 audio)
      cover.jpg
    """
    return [
        {
            "type": "folder",
            "title": "WAV",
            "children": [
                _file("audio", "01.wav", "w1", duration=60.0),
                _file("audio", "02.wav", "w2", duration=60.0),
                _file("audio", "03.wav", "w3", duration=60.0),
            ],
        },
        {
            "type": "folder",
            "title": "mp3",
            "children": [
                _file("audio", "02.mp3", "m2", duration=60.0),
                _file("audio", "01.mp3", "m1", duration=60.0),
                _file("text", "01.mp3.vtt", "s1"),
            ],
        },
        {
            "type": "folder",
            "title": "extras",
            "children": [
                {
                    "type": "folder",
                    "title": "MP3",
                    "children": [_file("audio", "bonus.mp3", "b1", duration=30.0)],
                },
            ],
        },
        _file("image", "cover.jpg", "c1"),
    ]
