"""
Subtitle parsing for timed lyrics.

Works ship subtitles as WebVTT (occasionally SRT) cue files or LRC line files.
Both become a TimedLyricsDTO in source order.
"""

from __future__ import annotations

import re
from typing import Iterator, List, Optional, Tuple

from asmr_catalog.core.dto.lyrics import LyricsItemDTO, TimedLyricsDTO

CUE_ARROW = "-->"
AUDIO_EXTENSIONS = (".mp3", ".wav")

# Duration given to the last LRC line, which has no following start time.
LAST_LRC_LINE_MS = 5000

_INDEX_LINE = re.compile(r"^\d+$")
_LRC_TS = re.compile(r"\[(\d+):(\d+)(?:[.:](\d+))?\]")
_LRC_META = re.compile(r"^\[(ar|ti|al|by|offset|au|length|re|ve):", re.IGNORECASE)


def subtitle_candidates(untranslated_title: str) -> Iterator[str]:
    """File titles that may hold lyrics for an audio file, in lookup order."""
    yield f"{untranslated_title}.vtt"
    stem = untranslated_title
    for ext in AUDIO_EXTENSIONS:
        if stem.lower().endswith(ext):
            stem = stem[: -len(ext)]
            break
    yield f"{stem}.lrc"


def parse_subtitles(text: str) -> TimedLyricsDTO:
    if CUE_ARROW in text:
        return parse_cues(text)
    return parse_lrc(text)


# ------------------------------------------------------------------
# WebVTT / SRT
# ------------------------------------------------------------------

def parse_time_to_ms(value: str) -> int:
    """HH:MM:SS.mmm or MM:SS.mmm, with "." or "," before the milliseconds."""
    parts = value.strip().replace(",", ".").split(":")
    if len(parts) not in (2, 3):
        raise ValueError(f"Invalid time format: {value!r}")

    try:
        hours = int(parts[0]) if len(parts) == 3 else 0
        minutes = int(parts[-2])
        seconds_part = parts[-1].split(".")
        seconds = int(seconds_part[0])
        millis = int(seconds_part[1].ljust(3, "0")[:3]) if len(seconds_part) > 1 else 0
    except ValueError as e:
        raise ValueError(f"Invalid time format: {value!r}") from e

    return (hours * 3600 + minutes * 60 + seconds) * 1000 + millis


def _parse_cue_timing(line: str) -> Tuple[int, int]:
    parts = line.split(CUE_ARROW)
    if len(parts) != 2:
        raise ValueError(f"Invalid timestamp format: {line!r}")
    end_fields = parts[1].split()
    if not end_fields:
        raise ValueError(f"Invalid timestamp format: {line!r}")
    # cue settings may follow the end time
    return parse_time_to_ms(parts[0]), parse_time_to_ms(end_fields[0])


def parse_cues(text: str) -> TimedLyricsDTO:
    lines = text.splitlines()
    if lines and lines[0].lstrip("\ufeff").strip().startswith("WEBVTT"):
        lines = lines[1:]

    items: List[LyricsItemDTO] = []
    timing: Optional[Tuple[int, int]] = None
    buffer: List[str] = []

    def flush() -> None:
        nonlocal timing
        if timing is not None and buffer:
            items.append(LyricsItemDTO(text="\n".join(buffer), start_ms=timing[0], end_ms=timing[1]))
        timing = None
        buffer.clear()

    for raw_line in lines:
        line = raw_line.strip()
        if not line:
            flush()
        elif CUE_ARROW in line:
            flush()
            timing = _parse_cue_timing(line)
        elif _INDEX_LINE.match(line) and not buffer:
            continue
        elif timing is not None:
            buffer.append(line)

    flush()
    return TimedLyricsDTO(items=items)


# ------------------------------------------------------------------
# LRC
# ------------------------------------------------------------------

def _lrc_ts_to_ms(mm: str, ss: str, frac: Optional[str]) -> int:
    if frac is None:
        ms = 0
    elif len(frac) == 1:
        ms = int(frac) * 100
    elif len(frac) == 2:
        ms = int(frac) * 10
    else:
        ms = int(frac[:3])
    return (int(mm) * 60 + int(ss)) * 1000 + ms


def parse_lrc(text: str) -> TimedLyricsDTO:
    """One item per timestamp; each line ends where the next one starts."""
    starts: List[Tuple[int, str]] = []
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or _LRC_META.match(line):
            continue
        matches = list(_LRC_TS.finditer(line))
        if not matches:
            continue
        lyric = _LRC_TS.sub("", line).strip()
        if not lyric:
            continue
        for m in matches:
            starts.append((_lrc_ts_to_ms(m.group(1), m.group(2), m.group(3)), lyric))

    starts.sort(key=lambda x: x[0])

    items: List[LyricsItemDTO] = []
    for i, (start, lyric) in enumerate(starts):
        end = starts[i + 1][0] if i + 1 < len(starts) else start + LAST_LRC_LINE_MS
        items.append(LyricsItemDTO(text=lyric, start_ms=start, end_ms=end))
    return TimedLyricsDTO(items=items)
