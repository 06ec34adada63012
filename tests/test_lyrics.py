import pytest

from asmr_catalog.core.lyrics import (
    parse_lrc,
    parse_subtitles,
    parse_time_to_ms,
    subtitle_candidates,
)

VTT = """WEBVTT

1
00:00:01.000 --> 00:00:03.500
こんにちは

2
00:00:04.000 --> 00:00:06.250 align:start
二行目
続き
"""

SRT = """1
00:00:01,000 --> 00:00:02,000
Hello

2
00:01:02,500 --> 00:01:03,000
World
"""

LRC = """[ti:Sample]
[00:01.00]first
[00:03.50]second
"""


def test_parse_vtt():
    lyrics = parse_subtitles(VTT)
    assert [(i.text, i.start_ms, i.end_ms) for i in lyrics.items] == [
        ("こんにちは", 1000, 3500),
        ("二行目\n続き", 4000, 6250),
    ]


def test_parse_srt():
    lyrics = parse_subtitles(SRT)
    assert [(i.start_ms, i.end_ms) for i in lyrics.items] == [(1000, 2000), (62500, 63000)]


def test_numeric_text_inside_cue_is_kept():
    lyrics = parse_subtitles("WEBVTT\n\n00:00.000 --> 00:01.000\nline\n123\n")
    assert lyrics.items[0].text == "line\n123"


def test_parse_lrc_ends_at_next_start():
    lyrics = parse_lrc(LRC)
    assert [(i.text, i.start_ms, i.end_ms) for i in lyrics.items] == [
        ("first", 1000, 3500),
        ("second", 3500, 8500),
    ]
    assert parse_subtitles(LRC) == lyrics


@pytest.mark.parametrize(
    "value, ms",
    [("00:00:01.000", 1000), ("01:02.5", 62500), ("1:00:00,001", 3600001)],
)
def test_parse_time_to_ms(value, ms):
    assert parse_time_to_ms(value) == ms


@pytest.mark.parametrize("value", ["12", "a:b", "1:2:3:4"])
def test_malformed_time_raises(value):
    with pytest.raises(ValueError):
        parse_time_to_ms(value)


def test_malformed_cue_raises():
    with pytest.raises(ValueError):
        parse_subtitles("WEBVTT\n\nnot a time --> 00:01.000\ntext\n")


def test_empty_input():
    assert parse_subtitles("").is_empty()
    assert parse_subtitles("WEBVTT\n").is_empty()


def test_subtitle_candidates():
    assert list(subtitle_candidates("01.mp3")) == ["01.mp3.vtt", "01.lrc"]
    assert list(subtitle_candidates("track.WAV")) == ["track.WAV.vtt", "track.lrc"]
    assert list(subtitle_candidates("notes")) == ["notes.vtt", "notes.lrc"]
