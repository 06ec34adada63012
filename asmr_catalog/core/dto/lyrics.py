from dataclasses import dataclass
from typing import List


@dataclass(frozen=True)
class LyricsItemDTO:
    text: str
    start_ms: int
    end_ms: int


@dataclass(frozen=True)
class TimedLyricsDTO:
    items: List[LyricsItemDTO]

    def is_empty(self) -> bool:
        return not self.items
