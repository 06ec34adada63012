from dataclasses import dataclass
from typing import Generic, List, Optional, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class PaginationDTO:
    current_page: int
    page_size: int
    total_count: int

    @property
    def has_more(self) -> bool:
        return self.current_page * self.page_size < self.total_count

    @property
    def next_continuation(self) -> Optional[str]:
        return str(self.current_page + 1) if self.has_more else None

    @classmethod
    def empty(cls) -> "PaginationDTO":
        return cls(current_page=0, page_size=0, total_count=0)


@dataclass(frozen=True)
class PageDTO(Generic[T]):
    items: List[T]
    continuation: Optional[str]
