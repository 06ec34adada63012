from __future__ import annotations

from concurrent.futures import Executor
from dataclasses import replace
from functools import partial
from typing import Any, Callable, Dict, List, Optional, Tuple
import asyncio
import logging

from asmr_catalog.core.api.asmr_one import SortOrder, SortType
from asmr_catalog.core.api.base import APIError
from asmr_catalog.core.api.contracts.catalog import CatalogAPIClient
from asmr_catalog.core.cache import TimeBasedLRUCache
from asmr_catalog.core.dto.lyrics import TimedLyricsDTO
from asmr_catalog.core.dto.media_tree import Audio, Folder, Text
from asmr_catalog.core.dto.pagination import PaginationDTO
from asmr_catalog.core.dto.playlist import LoginDTO, PlaylistDTO, UserDTO
from asmr_catalog.core.dto.work import CircleDTO, TagDTO, VoiceActorDTO, WorkDTO
from asmr_catalog.core.lyrics import parse_subtitles, subtitle_candidates
from asmr_catalog.core.media_tree import (
    build_tree,
    deep_copy,
    find_file,
    find_folder_with_audio,
    find_main_audio_folder,
    get_all_audio_files,
    get_folder,
)
from asmr_catalog.core.pagination import PaginatedListing
from asmr_catalog.core.settings import CatalogSettings
from asmr_catalog.core.translation import TranslationBatcher


logger = logging.getLogger(__name__)


class WorksManager:
    """
    Authoritative domain manager for works, playlists and lyrics.

    Guarantees:
    - Returns DTOs only
    - Cached media trees are never handed out; callers get deep copies
    - Title translation never fails a fetch; subtitle translation does
    - Blocking catalog calls run in the loop's executor
    """

    def __init__(
        self,
        client: CatalogAPIClient,
        batcher: TranslationBatcher,
        tree_cache: TimeBasedLRUCache[Folder],
        settings: Optional[CatalogSettings] = None,
        *,
        executor: Optional[Executor] = None,
    ):
        self._client = client
        self._batcher = batcher
        self._tree_cache = tree_cache
        self.settings = settings or CatalogSettings()
        self._executor = executor

    async def _call(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, partial(fn, *args, **kwargs))

    @property
    def _lang(self) -> str:
        return self.settings.translation_language

    # ---------------------------------------------------------
    # Media tree
    # ---------------------------------------------------------

    async def get_work_media_tree(self, work_id: str) -> Folder:
        key = str(work_id)
        cached = self._tree_cache.get(key)
        if cached is not None:
            logger.debug(f"Media tree cache hit for work {key}")
            return deep_copy(cached)

        raw = await self._call(self._client.get_work_tracks, key)
        tree = build_tree(raw)
        await self._batcher.translate_tree(tree, self._lang)

        self._tree_cache.put(key, deep_copy(tree))
        return tree

    async def get_main_tracks(self, work_id: str) -> List[Audio]:
        """Audio of the main audio folder, or every audio file when none qualifies."""
        tree = await self.get_work_media_tree(work_id)
        path = find_main_audio_folder(tree)
        if path is None:
            audios = get_all_audio_files(tree, True)
        else:
            audios = get_all_audio_files(get_folder(tree, path), False)
        return sorted(audios, key=lambda a: a.title)

    async def get_all_tracks(self, work_id: str) -> List[Audio]:
        tree = await self.get_work_media_tree(work_id)
        return sorted(get_all_audio_files(tree, True), key=lambda a: a.title)

    async def get_next_tracks(self, work_id: str, audio_hash: str) -> List[Audio]:
        """Audio files after `audio_hash` in its folder, in title order."""
        tree = await self.get_work_media_tree(work_id)
        folder = find_folder_with_audio(tree, audio_hash)
        if folder is None:
            logger.warning(f"No folder holds audio {audio_hash} in work {work_id}")
            return []

        ordered = sorted(get_all_audio_files(folder, False), key=lambda a: a.title)
        for index, audio in enumerate(ordered):
            if audio.hash == audio_hash:
                return ordered[index + 1:]
        return []

    async def get_lyrics(self, work_id: str, untranslated_title: str) -> Optional[TimedLyricsDTO]:
        tree = await self.get_work_media_tree(work_id)

        subtitle_file: Optional[Text] = None
        for candidate in subtitle_candidates(untranslated_title):
            node = find_file(tree, candidate)
            if isinstance(node, Text):
                subtitle_file = node
                break
        if subtitle_file is None:
            return None

        body = await self._call(self._client.get_subtitle_text, subtitle_file.media_download_url)
        lyrics = parse_subtitles(body)
        return await self._batcher.translate_lyrics(lyrics, self._lang)

    # ---------------------------------------------------------
    # Works
    # ---------------------------------------------------------

    async def get_work(self, work_id: str) -> WorkDTO:
        raw = await self._call(self._client.get_work, str(work_id))
        work = self._work_from_raw(raw)
        try:
            title = await self._batcher.translate_text(work.title, self._lang)
        except APIError as e:
            logger.warning(f"Keeping untranslated title for work {work_id}: {e}")
            return work
        return replace(work, title=title)

    async def get_related_works(self, work_id: str) -> List[WorkDTO]:
        data = await self._call(self._client.get_related_works, str(work_id))
        works, _ = await self._works_from_page(data)
        return works

    def search_works(
        self,
        keyword: str,
        *,
        order: SortOrder = SortOrder.RELEASE,
        sort: SortType = SortType.DESC,
    ) -> PaginatedListing[WorkDTO]:
        return self._works_listing(
            partial(
                self._client.search_works,
                keyword=keyword,
                order=order,
                sort=sort,
                subtitle=self.settings.subtitle_param,
            )
        )

    def get_works(
        self,
        *,
        order: SortOrder = SortOrder.RELEASE,
        sort: SortType = SortType.DESC,
    ) -> PaginatedListing[WorkDTO]:
        return self._works_listing(
            partial(
                self._client.get_works,
                order=order,
                sort=sort,
                subtitle=self.settings.subtitle_param,
            )
        )

    def get_popular_works(self) -> PaginatedListing[WorkDTO]:
        return self._works_listing(
            partial(self._client.get_popular_works, subtitle=self.settings.subtitle_param)
        )

    def get_recommended_works(self) -> PaginatedListing[WorkDTO]:
        return self._works_listing(
            partial(self._client.get_recommended_works, subtitle=self.settings.subtitle_param)
        )

    def get_favorites(
        self,
        *,
        order: SortOrder = SortOrder.RELEASE,
        sort: SortType = SortType.DESC,
    ) -> PaginatedListing[WorkDTO]:
        return self._works_listing(partial(self._client.get_favorites, order=order, sort=sort))

    def get_tag_works(self, tag_name: str) -> PaginatedListing[WorkDTO]:
        return self.search_works(f"$tag:{tag_name}$")

    def get_voice_actor_works(self, name: str) -> PaginatedListing[WorkDTO]:
        return self.search_works(f"$va:{name}$")

    def get_home_tag_feeds(self) -> Dict[str, PaginatedListing[WorkDTO]]:
        """One tag feed per tag the user chose to show, in settings order."""
        return {tag: self.get_tag_works(tag) for tag in self.settings.show_tags}

    def get_playlist_works(self, playlist_id: str) -> PaginatedListing[WorkDTO]:
        return self._works_listing(partial(self._client.get_playlist_works, playlist_id))

    def _works_listing(self, fetch_raw: Callable[..., Dict[str, Any]]) -> PaginatedListing[WorkDTO]:
        async def fetch_page(page: int) -> Tuple[List[WorkDTO], PaginationDTO]:
            data = await self._call(fetch_raw, page=page)
            return await self._works_from_page(data)

        return PaginatedListing(fetch_page)

    async def _works_from_page(self, data: Dict[str, Any]) -> Tuple[List[WorkDTO], PaginationDTO]:
        works = [self._work_from_raw(w) for w in data.get("works", [])]
        if self.settings.only_show_subtitled:
            works = [w for w in works if w.has_subtitle]
        works = await self._batcher.translate_works(works, self._lang)
        return works, self._pagination_from_raw(data.get("pagination"))

    # ---------------------------------------------------------
    # Playlists
    # ---------------------------------------------------------

    def get_playlists(self) -> PaginatedListing[PlaylistDTO]:
        async def fetch_page(page: int) -> Tuple[List[PlaylistDTO], PaginationDTO]:
            data = await self._call(self._client.get_playlists, page=page)
            playlists = [self._playlist_from_raw(p) for p in data.get("playlists", [])]
            return playlists, self._pagination_from_raw(data.get("pagination"))

        return PaginatedListing(fetch_page)

    async def create_playlist(
        self,
        name: str,
        *,
        description: str = "",
        privacy: int = 0,
        work_ids: Optional[List[str]] = None,
    ) -> PlaylistDTO:
        raw = await self._call(
            self._client.create_playlist,
            name,
            description=description,
            privacy=privacy,
            works=work_ids,
        )
        return self._playlist_from_raw(raw)

    async def edit_playlist(
        self,
        playlist_id: str,
        *,
        name: str,
        description: str = "",
        privacy: int = 0,
    ) -> None:
        await self._call(
            self._client.edit_playlist,
            playlist_id,
            name=name,
            description=description,
            privacy=privacy,
        )

    async def delete_playlist(self, playlist_id: str) -> None:
        await self._call(self._client.delete_playlist, playlist_id)

    async def add_works_to_playlist(self, playlist_id: str, work_ids: List[str]) -> None:
        await self._call(self._client.add_works_to_playlist, playlist_id, work_ids)

    async def remove_works_from_playlist(self, playlist_id: str, work_ids: List[str]) -> None:
        await self._call(self._client.remove_works_from_playlist, playlist_id, work_ids)

    # ---------------------------------------------------------
    # Account / tags / ratings
    # ---------------------------------------------------------

    async def login(self, name: str, password: str) -> LoginDTO:
        data = await self._call(self._client.login, name, password)
        login = self._login_from_raw(data)
        self._client.update_user(login.user.recommender_uuid, login.token)
        logger.info(f"Logged in as {login.user.name}")
        return login

    def logout(self) -> None:
        self._client.update_user(None, None)

    async def get_tags(self) -> List[TagDTO]:
        raw = await self._call(self._client.get_tags)
        return [self._tag_from_raw(t) for t in raw]

    async def rate_work(self, work_id: str, rating: Optional[int]) -> None:
        if rating is None:
            await self._call(self._client.delete_rating, str(work_id))
        else:
            await self._call(self._client.rate_work, str(work_id), rating)

    # ---------------------------------------------------------
    # Raw -> DTO
    # ---------------------------------------------------------

    def _pagination_from_raw(self, raw: Any) -> PaginationDTO:
        if not isinstance(raw, dict):
            return PaginationDTO.empty()
        return PaginationDTO(
            current_page=int(raw.get("current_page") or 0),
            page_size=int(raw.get("page_size") or 0),
            total_count=int(raw.get("total_count") or 0),
        )

    def _tag_from_raw(self, raw: Dict[str, Any]) -> TagDTO:
        return TagDTO(id=int(raw["id"]), name=raw["name"], en_name=raw.get("en_name"))

    def _circle_from_raw(self, raw: Any) -> Optional[CircleDTO]:
        if not isinstance(raw, dict):
            return None
        return CircleDTO(
            id=int(raw.get("id") or 0),
            name=str(raw.get("name") or ""),
            source_id=str(raw.get("source_id") or ""),
            source_type=str(raw.get("source_type") or ""),
        )

    def _work_from_raw(self, raw: Dict[str, Any]) -> WorkDTO:
        return WorkDTO(
            id=raw["id"],
            title=raw["title"],
            circle_id=raw["circle_id"],
            name=raw["name"],
            nsfw=raw["nsfw"],
            release=raw["release"],
            has_subtitle=raw["has_subtitle"],
            dl_count=raw.get("dl_count", 0),
            price=raw.get("price", 0),
            review_count=raw.get("review_count", 0),
            rate_count=raw.get("rate_count", 0),
            rate_average=raw.get("rate_average", 0.0),
            duration=raw.get("duration", 0),
            create_date=raw.get("create_date"),
            user_rating=raw.get("user_rating"),
            source_id=raw.get("source_id"),
            source_type=raw.get("source_type"),
            source_url=raw.get("source_url"),
            tags=[self._tag_from_raw(t) for t in raw.get("tags", [])],
            vas=[VoiceActorDTO(id=va["id"], name=va["name"]) for va in raw.get("vas", [])],
            circle=self._circle_from_raw(raw.get("circle")),
            main_cover_url=raw.get("main_cover_url"),
            thumbnail_cover_url=raw.get("thumbnail_cover_url"),
            sam_cover_url=raw.get("sam_cover_url"),
        )

    def _playlist_from_raw(self, raw: Dict[str, Any]) -> PlaylistDTO:
        return PlaylistDTO(
            id=raw["id"],
            name=raw["name"],
            user_name=raw.get("user_name", ""),
            privacy=raw.get("privacy", 0),
            locale=raw.get("locale", ""),
            description=raw.get("description", ""),
            works_count=raw.get("works_count", 0),
            created_at=raw.get("created_at", ""),
            updated_at=raw.get("updated_at", ""),
            playback_count=raw.get("playback_count", 0),
            latest_work_id=raw.get("latest_work_id"),
            main_cover_url=raw.get("main_cover_url"),
        )

    def _login_from_raw(self, raw: Dict[str, Any]) -> LoginDTO:
        user = raw.get("user") or {}
        return LoginDTO(
            user=UserDTO(
                name=str(user.get("name") or ""),
                group=str(user.get("group") or ""),
                logged_in=bool(user.get("loggedIn", True)),
                recommender_uuid=str(user.get("recommenderUuid") or ""),
                email=user.get("email"),
            ),
            token=str(raw["token"]),
        )
