from dataclasses import dataclass
from typing import List, Optional

from asmr_catalog.core.dto.pagination import PaginationDTO

SYSTEM_PLAYLIST_NAMES = {
    "__SYS_PLAYLIST_MARKED": "Marked",
    "__SYS_PLAYLIST_LIKED": "Liked",
}


@dataclass(frozen=True)
class PlaylistDTO:
    id: str
    name: str
    user_name: str
    privacy: int
    locale: str
    description: str
    works_count: int
    created_at: str
    updated_at: str
    playback_count: int = 0
    latest_work_id: Optional[int] = None
    main_cover_url: Optional[str] = None

    @property
    def display_name(self) -> str:
        return SYSTEM_PLAYLIST_NAMES.get(self.name, self.name)

    @property
    def is_private(self) -> bool:
        return self.privacy == 0


@dataclass(frozen=True)
class PlaylistsPageDTO:
    playlists: List[PlaylistDTO]
    pagination: PaginationDTO


@dataclass(frozen=True)
class UserDTO:
    name: str
    group: str
    logged_in: bool
    recommender_uuid: str
    email: Optional[str] = None


@dataclass(frozen=True)
class LoginDTO:
    user: UserDTO
    token: str
