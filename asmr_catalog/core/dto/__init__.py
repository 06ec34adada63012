from asmr_catalog.core.dto.media_tree import (
    Audio,
    Folder,
    FolderWork,
    Image,
    MediaFile,
    MediaTreeNode,
    NodeKind,
    Other,
    Text,
)
from asmr_catalog.core.dto.pagination import PageDTO, PaginationDTO
from asmr_catalog.core.dto.work import (
    CircleDTO,
    TagDTO,
    VoiceActorDTO,
    WorkDTO,
    WorksPageDTO,
)
from asmr_catalog.core.dto.playlist import (
    LoginDTO,
    PlaylistDTO,
    PlaylistsPageDTO,
    UserDTO,
)
from asmr_catalog.core.dto.lyrics import LyricsItemDTO, TimedLyricsDTO

__all__ = [
    # Media tree
    "NodeKind",
    "FolderWork",
    "MediaTreeNode",
    "MediaFile",
    "Folder",
    "Audio",
    "Text",
    "Image",
    "Other",

    # Pagination
    "PaginationDTO",
    "PageDTO",

    # Works
    "WorkDTO",
    "WorksPageDTO",
    "TagDTO",
    "VoiceActorDTO",
    "CircleDTO",

    # Playlists / account
    "PlaylistDTO",
    "PlaylistsPageDTO",
    "UserDTO",
    "LoginDTO",

    # Lyrics
    "LyricsItemDTO",
    "TimedLyricsDTO",
]
