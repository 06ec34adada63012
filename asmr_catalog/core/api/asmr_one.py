from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional
from urllib.parse import quote
import logging
import uuid as uuid_lib

import requests

from .base import APIError, BaseAPIClient, Timeout
from asmr_catalog.core.http_client import DEFAULT_TIMEOUT_SECONDS


ACCOUNT_API_URL = "https://api.asmr.one/api"
DEFAULT_MIRROR = "asmr-200"
PLAYLIST_PAGE_SIZE = 96


class SortOrder(str, Enum):
    RELEASE = "release"
    NEWEST = "create_date"
    MY_RATING = "rating"
    PRICE = "price"
    RATING = "rate_average_2dp"
    REVIEW_COUNT = "review_count"
    RJ_CODE = "id"
    NSFW = "nsfw"  # asc is sfw, desc is nsfw
    RANDOM = "random"


class SortType(str, Enum):
    ASC = "asc"
    DESC = "desc"


def _empty_page(key: str) -> Dict[str, Any]:
    return {
        key: [],
        "pagination": {"current_page": 0, "page_size": 0, "total_count": 0},
    }


class AsmrOneClient(BaseAPIClient):
    PLATFORM = "asmr.one"
    _logger = logging.getLogger(__name__)

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        *,
        settings=None,
        timeout: Timeout = (DEFAULT_TIMEOUT_SECONDS, DEFAULT_TIMEOUT_SECONDS),
    ):
        super().__init__(session, timeout=timeout)
        self.settings = settings
        mirror = getattr(settings, "site_mirror", None) or DEFAULT_MIRROR
        self.BASE_URL = f"https://api.{mirror}.com/api"
        self.uuid = str(uuid_lib.uuid4())
        self._tags_cache: Optional[List[dict]] = None

    def update_user(self, new_uuid: Optional[str], new_token: Optional[str]) -> None:
        self.uuid = new_uuid or str(uuid_lib.uuid4())
        self.token = new_token

    # --------------------------------------------------
    # Settings driven parameters
    # --------------------------------------------------

    def _only_sfw(self) -> bool:
        return bool(getattr(self.settings, "only_show_sfw", False))

    def _order_param(self, order: SortOrder) -> str:
        # The API has no SFW filter; sorting by nsfw ascending puts SFW first.
        return SortOrder.NSFW.value if self._only_sfw() else order.value

    def _sort_param(self, sort: SortType) -> str:
        return SortType.ASC.value if self._only_sfw() else sort.value

    # --------------------------------------------------
    # Account
    # --------------------------------------------------

    def login(self, name: str, password: str) -> Dict[str, Any]:
        try:
            data = self._request(
                "POST",
                f"{ACCOUNT_API_URL}/auth/me",
                json_body={"name": name, "password": password},
            )
        except APIError as e:
            raise APIError(f"Failed to login: {e}") from e
        if not isinstance(data, dict) or "token" not in data:
            raise APIError(f"{self.PLATFORM} login response missing token")
        return data

    # --------------------------------------------------
    # Works
    # --------------------------------------------------

    def get_work_tracks(self, work_id: str) -> List[dict]:
        data = self._request("GET", f"/tracks/{work_id}", params={"v": 1})
        if not isinstance(data, list):
            raise APIError(f"{self.PLATFORM} tracks response not a list")
        return data

    def get_work(self, work_id: str) -> dict:
        data = self._request("GET", f"/workInfo/{work_id}")
        if not isinstance(data, dict):
            raise APIError(f"{self.PLATFORM} work response not an object")
        return self.normalize_work(data)

    def get_works(
        self,
        *,
        page: int = 1,
        order: SortOrder = SortOrder.RELEASE,
        sort: SortType = SortType.DESC,
        subtitle: int = 0,
    ) -> Dict[str, Any]:
        params = {
            "order": self._order_param(order),
            "sort": self._sort_param(sort),
            "page": page,
            "subtitle": subtitle,
        }
        return self._works_page(self._request("GET", "/works", params=params))

    def search_works(
        self,
        *,
        keyword: str = " ",
        page: int = 1,
        order: SortOrder = SortOrder.RELEASE,
        sort: SortType = SortType.DESC,
        seed: int = 64,
        subtitle: int = 0,
        include_translation_works: bool = True,
    ) -> Dict[str, Any]:
        params = {
            "page": page,
            "order": self._order_param(order),
            "sort": self._sort_param(sort),
            "seed": seed,
            "subtitle": subtitle,
            "includeTranslationWorks": str(include_translation_works).lower(),
        }
        path = f"/search/{quote(keyword, safe='')}"
        return self._works_page(self._request("GET", path, params=params))

    def get_popular_works(
        self,
        *,
        page: int = 1,
        keyword: str = " ",
        subtitle: int = 0,
    ) -> Dict[str, Any]:
        body = {"keyword": keyword, "page": page, "subtitle": subtitle}
        return self._works_page(self._request("POST", "/recommender/popular", json_body=body))

    def get_recommended_works(
        self,
        *,
        page: int = 1,
        keyword: str = " ",
        recommender_uuid: Optional[str] = None,
        subtitle: int = 0,
    ) -> Dict[str, Any]:
        body = {
            "keyword": keyword,
            "recommenderUuid": recommender_uuid or self.uuid,
            "page": page,
            "subtitle": subtitle,
        }
        return self._works_page(
            self._request("POST", "/recommender/recommend-for-user", json_body=body)
        )

    def get_related_works(self, item_id: str, *, keyword: str = " ") -> Dict[str, Any]:
        body = {"keyword": keyword, "itemId": item_id}
        return self._works_page(
            self._request("POST", "/recommender/item-neighbors", json_body=body)
        )

    def get_favorites(
        self,
        *,
        page: int = 1,
        order: SortOrder = SortOrder.RELEASE,
        sort: SortType = SortType.DESC,
    ) -> Dict[str, Any]:
        if self.token is None:
            return _empty_page("works")
        params = {
            "order": self._order_param(order),
            "sort": self._sort_param(sort),
            "page": page,
        }
        return self._works_page(self._request("GET", "/review", params=params))

    # --------------------------------------------------
    # Playlists
    # --------------------------------------------------

    def get_playlists(
        self,
        *,
        page: int = 1,
        page_size: int = PLAYLIST_PAGE_SIZE,
        filter_by: str = "all",
    ) -> Dict[str, Any]:
        if self.token is None:
            return _empty_page("playlists")
        data = self._request(
            "GET",
            f"{ACCOUNT_API_URL}/playlist/get-playlists",
            params={"page": page, "pageSize": page_size, "filterBy": filter_by},
        )
        if not isinstance(data, dict):
            raise APIError(f"{self.PLATFORM} playlists response not an object")
        playlists = data.get("playlists") or []
        return {
            "playlists": [self.normalize_playlist(p) for p in playlists if isinstance(p, dict)],
            "pagination": self.normalize_pagination(data.get("pagination")),
        }

    def get_playlist_works(
        self,
        playlist_id: str,
        *,
        page: int = 1,
        page_size: int = PLAYLIST_PAGE_SIZE,
    ) -> Dict[str, Any]:
        data = self._request(
            "GET",
            f"{ACCOUNT_API_URL}/playlist/get-playlist-works",
            params={"id": playlist_id, "page": page, "pageSize": page_size},
        )
        return self._works_page(data)

    def add_works_to_playlist(self, playlist_id: str, work_ids: List[str]) -> None:
        self._request(
            "POST",
            f"{ACCOUNT_API_URL}/playlist/add-works-to-playlist",
            json_body={"id": playlist_id, "works": list(work_ids)},
        )

    def remove_works_from_playlist(self, playlist_id: str, work_ids: List[str]) -> None:
        self._request(
            "POST",
            f"{ACCOUNT_API_URL}/playlist/remove-works-from-playlist",
            json_body={"id": playlist_id, "works": list(work_ids)},
        )

    def create_playlist(
        self,
        name: str,
        *,
        description: str = "",
        privacy: int = 0,
        locale: str = "en",
        works: Optional[List[str]] = None,
    ) -> dict:
        data = self._request(
            "POST",
            f"{ACCOUNT_API_URL}/playlist/create-playlist",
            json_body={
                "name": name,
                "privacy": privacy,
                "locale": locale,
                "description": description,
                "works": list(works or []),
            },
        )
        if not isinstance(data, dict):
            raise APIError(f"{self.PLATFORM} create playlist response not an object")
        return self.normalize_playlist(data)

    def delete_playlist(self, playlist_id: str) -> None:
        self._request(
            "POST",
            f"{ACCOUNT_API_URL}/playlist/delete-playlist",
            json_body={"id": playlist_id},
        )

    def edit_playlist(
        self,
        playlist_id: str,
        *,
        name: str,
        description: str = "",
        privacy: int = 0,
    ) -> None:
        self._request(
            "POST",
            f"{ACCOUNT_API_URL}/playlist/edit-playlist-metadata",
            json_body={
                "id": playlist_id,
                "data": {"name": name, "privacy": privacy, "description": description},
            },
        )

    # --------------------------------------------------
    # Tags / Subtitles / Reviews
    # --------------------------------------------------

    def get_tags(self) -> List[dict]:
        """Tags sorted by display name. Fetched once per client."""
        if self._tags_cache is not None:
            return self._tags_cache
        data = self._request("GET", "/tags/")
        if not isinstance(data, list):
            raise APIError(f"{self.PLATFORM} tags response not a list")
        tags = [self.normalize_tag(t) for t in data if isinstance(t, dict)]
        tags.sort(key=lambda t: t["en_name"] or t["name"])
        self._tags_cache = tags
        self._logger.info(f"Loaded {len(tags)} tags from {self.PLATFORM}")
        return tags

    def get_subtitle_text(self, url: str) -> str:
        return self._request_text("GET", url)

    def rate_work(self, work_id: str, rating: Optional[int]) -> None:
        self._request(
            "PUT",
            f"{ACCOUNT_API_URL}/review",
            json_body={"work_id": work_id, "rating": rating},
        )

    def delete_rating(self, work_id: str) -> None:
        self._request("DELETE", f"{ACCOUNT_API_URL}/review", params={"work_id": work_id})

    # --------------------------------------------------
    # Normalization
    # --------------------------------------------------

    def _works_page(self, data: Any) -> Dict[str, Any]:
        if not isinstance(data, dict):
            raise APIError(f"{self.PLATFORM} works response not an object")
        works = data.get("works") or []
        return {
            "works": [self.normalize_work(w) for w in works if isinstance(w, dict)],
            "pagination": self.normalize_pagination(data.get("pagination")),
        }

    def normalize_pagination(self, raw: Any) -> dict:
        raw = raw if isinstance(raw, dict) else {}
        return {
            "current_page": int(raw.get("currentPage") or raw.get("page") or 0),
            "page_size": int(raw.get("pageSize") or 0),
            "total_count": int(raw.get("totalCount") or 0),
        }

    def normalize_tag(self, raw: dict) -> dict:
        i18n = raw.get("i18n") or {}
        en = i18n.get("en-us") or {}
        return {
            "id": int(raw.get("id") or 0),
            "name": str(raw.get("name") or ""),
            "en_name": en.get("name"),
        }

    def normalize_work(self, raw: dict) -> dict:
        circle = raw.get("circle")
        return {
            "id": int(raw.get("id") or 0),
            "title": str(raw.get("title") or ""),
            "circle_id": int(raw.get("circle_id") or 0),
            "name": str(raw.get("name") or ""),
            "nsfw": bool(raw.get("nsfw", False)),
            "release": str(raw.get("release") or ""),
            "has_subtitle": bool(raw.get("has_subtitle", False)),
            "dl_count": int(raw.get("dl_count") or 0),
            "price": int(raw.get("price") or 0),
            "review_count": int(raw.get("review_count") or 0),
            "rate_count": int(raw.get("rate_count") or 0),
            "rate_average": float(raw.get("rate_average_2dp") or 0.0),
            "duration": int(raw.get("duration") or 0),
            "create_date": raw.get("create_date"),
            "user_rating": raw.get("userRating"),
            "source_id": raw.get("source_id"),
            "source_type": raw.get("source_type"),
            "source_url": raw.get("source_url"),
            "tags": [self.normalize_tag(t) for t in raw.get("tags") or [] if isinstance(t, dict)],
            "vas": [
                {"id": str(va.get("id") or ""), "name": str(va.get("name") or "")}
                for va in raw.get("vas") or []
                if isinstance(va, dict)
            ],
            "circle": circle if isinstance(circle, dict) else None,
            "main_cover_url": raw.get("mainCoverUrl"),
            "thumbnail_cover_url": raw.get("thumbnailCoverUrl"),
            "sam_cover_url": raw.get("samCoverUrl"),
        }

    def normalize_playlist(self, raw: dict) -> dict:
        return {
            "id": str(raw.get("id") or ""),
            "name": str(raw.get("name") or ""),
            "user_name": str(raw.get("user_name") or ""),
            "privacy": int(raw.get("privacy") or 0),
            "locale": str(raw.get("locale") or ""),
            "description": str(raw.get("description") or ""),
            "works_count": int(raw.get("works_count") or 0),
            "playback_count": int(raw.get("playback_count") or 0),
            "created_at": str(raw.get("created_at") or ""),
            "updated_at": str(raw.get("updated_at") or ""),
            "latest_work_id": raw.get("latestWorkID"),
            "main_cover_url": raw.get("mainCoverUrl"),
        }
