"""Page/pageSize handling shared by every list endpoint."""

from dataclasses import dataclass

from stateflow.utils.identifiers import INT64_MAX

MAX_PAGE_SIZE = 100
# keeps the SQL offset inside a signed 64-bit integer
MAX_PAGE = INT64_MAX // MAX_PAGE_SIZE


@dataclass(frozen=True)
class Page:
    page: int
    page_size: int

    @classmethod
    def clamp(cls, page: int | None, page_size: int | None, default_size: int = 10) -> "Page":
        """Clamp page into [1, MAX_PAGE] and page_size into [1, MAX_PAGE_SIZE]."""
        if page is None or page < 1:
            page = 1
        page = min(page, MAX_PAGE)
        if page_size is None:
            page_size = default_size
        page_size = max(1, min(page_size, MAX_PAGE_SIZE))
        return cls(page=page, page_size=page_size)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size

    @property
    def limit(self) -> int:
        return self.page_size
