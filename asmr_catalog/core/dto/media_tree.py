from __future__ import annotations

from dataclasses import InitVar, dataclass, field
from enum import Enum
from typing import ClassVar, List, Optional


class NodeKind(str, Enum):
    FOLDER = "folder"
    AUDIO = "audio"
    TEXT = "text"
    IMAGE = "image"
    OTHER = "other"


@dataclass(frozen=True)
class FolderWork:
    id: int
    source_id: str
    source_type: str


@dataclass(kw_only=True)
class MediaTreeNode:
    """
    Base of the closed node set: Folder, Audio, Text, Image, Other.

    `title` is rewritten by translation. `untranslated_title` is fixed at
    construction (defaults to the construction-time title) and is read-only.
    """

    KIND: ClassVar[NodeKind]

    title: str
    original_title: InitVar[Optional[str]] = None
    _untranslated_title: str = field(init=False, repr=False)

    def __post_init__(self, original_title: Optional[str]) -> None:
        self._untranslated_title = self.title if original_title is None else original_title

    @property
    def kind(self) -> NodeKind:
        return self.KIND

    @property
    def untranslated_title(self) -> str:
        return self._untranslated_title


@dataclass(kw_only=True)
class Folder(MediaTreeNode):
    KIND: ClassVar[NodeKind] = NodeKind.FOLDER

    children: List[MediaTreeNode] = field(default_factory=list)


@dataclass(kw_only=True)
class MediaFile(MediaTreeNode):
    """Identifying fields shared by every leaf kind."""

    hash: str
    work: FolderWork
    work_title: str
    media_stream_url: str
    media_download_url: str
    size: int


@dataclass(kw_only=True)
class Audio(MediaFile):
    KIND: ClassVar[NodeKind] = NodeKind.AUDIO

    duration: float
    stream_low_quality_url: Optional[str] = None


@dataclass(kw_only=True)
class Text(MediaFile):
    KIND: ClassVar[NodeKind] = NodeKind.TEXT

    duration: Optional[float] = None


@dataclass(kw_only=True)
class Image(MediaFile):
    KIND: ClassVar[NodeKind] = NodeKind.IMAGE


@dataclass(kw_only=True)
class Other(MediaFile):
    KIND: ClassVar[NodeKind] = NodeKind.OTHER
