from __future__ import annotations

from typing import Any, Dict, List, Optional, Protocol


class CatalogAPIClient(Protocol):
    PLATFORM: str

    # Media tree
    def get_work_tracks(self, work_id: str) -> List[dict]:
        ...

    # Work detail
    def get_work(self, work_id: str) -> dict:
        ...

    # Listings
    def get_works(
        self,
        *,
        page: int,
        order: Any,
        sort: Any,
        subtitle: int = 0,
    ) -> Dict[str, Any]:
        ...

    def search_works(
        self,
        *,
        keyword: str,
        page: int,
        order: Any,
        sort: Any,
        subtitle: int = 0,
    ) -> Dict[str, Any]:
        ...

    def get_popular_works(self, *, page: int, subtitle: int = 0) -> Dict[str, Any]:
        ...

    def get_recommended_works(
        self,
        *,
        page: int,
        recommender_uuid: Optional[str] = None,
        subtitle: int = 0,
    ) -> Dict[str, Any]:
        ...

    def get_related_works(self, item_id: str) -> Dict[str, Any]:
        ...

    def get_favorites(self, *, page: int, order: Any, sort: Any) -> Dict[str, Any]:
        ...

    # Playlists
    def get_playlists(self, *, page: int) -> Dict[str, Any]:
        ...

    def get_playlist_works(self, playlist_id: str, *, page: int) -> Dict[str, Any]:
        ...

    def create_playlist(self, name: str, **kwargs: Any) -> dict:
        ...

    def edit_playlist(self, playlist_id: str, *, name: str, **kwargs: Any) -> None:
        ...

    def delete_playlist(self, playlist_id: str) -> None:
        ...

    def add_works_to_playlist(self, playlist_id: str, work_ids: List[str]) -> None:
        ...

    def remove_works_from_playlist(self, playlist_id: str, work_ids: List[str]) -> None:
        ...

    # Account
    def login(self, name: str, password: str) -> Dict[str, Any]:
        ...

    def update_user(self, new_uuid: Optional[str], new_token: Optional[str]) -> None:
        ...

    # Reviews
    def rate_work(self, work_id: str, rating: Optional[int]) -> None:
        ...

    def delete_rating(self, work_id: str) -> None:
        ...

    # Tags
    def get_tags(self) -> List[dict]:
        ...

    # Subtitles
    def get_subtitle_text(self, url: str) -> str:
        ...
