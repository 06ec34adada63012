from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from asmr_catalog.core.dto.pagination import PaginationDTO


@dataclass(frozen=True)
class TagDTO:
    id: int
    name: str
    en_name: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.en_name or self.name


@dataclass(frozen=True)
class VoiceActorDTO:
    id: str
    name: str


@dataclass(frozen=True)
class CircleDTO:
    id: int
    name: str
    source_id: str
    source_type: str


@dataclass(frozen=True)
class WorkDTO:
    id: int
    title: str
    circle_id: int
    name: str  # circle display name, translated alongside the title

    nsfw: bool
    release: str
    has_subtitle: bool

    dl_count: int = 0
    price: int = 0
    review_count: int = 0
    rate_count: int = 0
    rate_average: float = 0.0
    duration: int = 0
    create_date: Optional[str] = None
    user_rating: Optional[int] = None

    source_id: Optional[str] = None
    source_type: Optional[str] = None
    source_url: Optional[str] = None

    tags: List[TagDTO] = field(default_factory=list)
    vas: List[VoiceActorDTO] = field(default_factory=list)
    circle: Optional[CircleDTO] = None

    main_cover_url: Optional[str] = None
    thumbnail_cover_url: Optional[str] = None
    sam_cover_url: Optional[str] = None

    @property
    def rating_stars(self) -> str:
        if self.user_rating is None:
            return ""
        filled = max(0, min(5, self.user_rating))
        return "★" * filled + "☆" * (5 - filled)

    def description(self) -> str:
        tags = ", ".join(t.display_name for t in self.tags)
        return (
            f"Tags: {tags}\n"
            f"Full Title: {self.title}\n"
            f"Downloads: {self.dl_count}, Price: {self.price}, "
            f"Reviews: {self.review_count}, Rating: {self.rate_average}\n"
        )


@dataclass(frozen=True)
class WorksPageDTO:
    works: List[WorkDTO]
    pagination: PaginationDTO
