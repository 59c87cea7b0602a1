"""File listing: view predicates, sorting, pagination and search."""

import math
from dataclasses import dataclass, replace
from typing import List, Optional

from drive_api.config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from drive_api.database import MAX_ROW_ID
from drive_api.repositories.file_repository import File, FileOrdering, FilePredicate
from drive_api.repositories.interfaces import FileRepository
from drive_api.types import SortField, SortOrder, View
from drive_api.utils import escape_like
from drive_common.logging_config import get_logger

logger = get_logger(__name__)

SORT_COLUMNS = {
    SortField.NAME: "name",
    SortField.SIZE: "size",
    SortField.CREATED_AT: "created_at",
    SortField.UPDATED_AT: "updated_at",
}

# Views that list newest activity first unless the client says otherwise
RECENCY_VIEWS = (View.RECENT, View.TRASH)


def max_page(limit: int) -> int:
    """Highest page whose offset still fits an SQLite INTEGER."""
    return MAX_ROW_ID // limit


def _to_int(value, default: int) -> int:
    if value is None or value == "":
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


@dataclass
class ListingRequest:
    view: View = View.MY_DRIVE
    folder_id: Optional[int] = None
    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE
    sort_by: Optional[SortField] = None
    sort_order: Optional[SortOrder] = None
    search: Optional[str] = None

    @classmethod
    def from_params(
        cls,
        view: Optional[str] = None,
        folder_id: Optional[int] = None,
        page=None,
        limit=None,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
        search: Optional[str] = None,
        max_page_size: int = MAX_PAGE_SIZE,
    ) -> "ListingRequest":
        """
        Build a request from raw query parameters.

        Unknown views fall back to My Drive, unknown sort fields to name,
        and page/limit are clamped to [1, max_page(limit)] and [1, max_page_size].
        """
        limit = min(max(1, _to_int(limit, DEFAULT_PAGE_SIZE)), max_page_size)
        return cls(
            view=View.parse(view),
            folder_id=folder_id,
            page=min(max(1, _to_int(page, 1)), max_page(limit)),
            limit=limit,
            sort_by=SortField.parse(sort_by),
            sort_order=SortOrder.parse(sort_order),
            search=search,
        )

    @property
    def search_term(self) -> str:
        return (self.search or "").strip()

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass(frozen=True)
class Pagination:
    page: int
    limit: int
    total_count: int
    total_pages: int
    has_next: bool
    has_prev: bool

    @classmethod
    def compute(cls, page: int, limit: int, total_count: int) -> "Pagination":
        return cls(
            page=page,
            limit=limit,
            total_count=total_count,
            total_pages=math.ceil(total_count / limit) if limit else 0,
            has_next=page * limit < total_count,
            has_prev=page > 1,
        )


@dataclass
class ListingResult:
    files: List[File]
    pagination: Pagination
    view: View
    search_query: Optional[str] = None


class FileQueryEngine:
    """
    Answers listing and search requests for one user.

    One predicate is built per request and used for both the page query
    and the count query, so totals always match the filter of the page.
    """

    def __init__(self, file_repo: FileRepository, max_page_size: int = MAX_PAGE_SIZE):
        self.file_repo = file_repo
        self.max_page_size = max_page_size

    @staticmethod
    def effective_view(request: ListingRequest) -> View:
        """
        A non-empty search term takes precedence over the requested view.
        """
        if request.search_term:
            return View.SEARCH
        return request.view

    def build_predicate(self, user_id: str, request: ListingRequest) -> FilePredicate:
        view = self.effective_view(request)
        predicate = FilePredicate(user_id)

        if view is View.TRASH:
            return predicate.and_("is_trashed = 1")

        predicate = predicate.and_("is_trashed = 0")

        if view is View.MY_DRIVE:
            if request.folder_id is None:
                return predicate.and_("folder_id IS NULL")
            return predicate.and_("folder_id = ?", request.folder_id)

        if view is View.STARRED:
            return predicate.and_("is_starred = 1")

        if view is View.SEARCH and request.search_term:
            pattern = f"%{escape_like(request.search_term.casefold())}%"
            return predicate.and_(
                "(casefold(name) LIKE ? ESCAPE '\\' OR casefold(mime_type) LIKE ? ESCAPE '\\')",
                pattern,
                pattern,
            )

        # RECENT, and SEARCH without a term
        return predicate

    def build_ordering(self, request: ListingRequest) -> FileOrdering:
        view = self.effective_view(request)
        recency = view in RECENCY_VIEWS

        sort_by = request.sort_by
        if sort_by is None:
            sort_by = SortField.UPDATED_AT if recency else SortField.NAME

        sort_order = request.sort_order
        if sort_order is None:
            sort_order = SortOrder.DESC if recency else SortOrder.ASC

        return FileOrdering(
            column=SORT_COLUMNS[sort_by],
            descending=sort_order is SortOrder.DESC,
            case_insensitive=sort_by is SortField.NAME,
        )

    def list_files(self, user_id: str, request: ListingRequest) -> ListingResult:
        limit = min(max(1, request.limit), self.max_page_size)
        page = min(max(1, request.page), max_page(limit))
        if (limit, page) != (request.limit, request.page):
            request = replace(request, limit=limit, page=page)

        view = self.effective_view(request)
        predicate = self.build_predicate(user_id, request)
        ordering = self.build_ordering(request)

        files = self.file_repo.find_page(predicate, ordering, request.limit, request.offset)
        total_count = self.file_repo.count(predicate)

        logger.debug(
            f"Listed {len(files)}/{total_count} files view={view.value} page={request.page} "
            f"limit={request.limit} [user_id={user_id}]"
        )
        return ListingResult(
            files=files,
            pagination=Pagination.compute(request.page, request.limit, total_count),
            view=view,
            search_query=request.search_term or None,
        )
