"""Search and sort helpers over title lists. Neither mutates its input."""

from datetime import datetime, timezone
from enum import Enum
from typing import Iterable, List, Optional, Union

from manga_tracker.core import MangaKind, ReadingStatus, Title
from manga_tracker.io.tracker_document import as_utc

_EPOCH = datetime.fromtimestamp(0, tz=timezone.utc)


class SortKey(str, Enum):
    TITLE = "title"
    LAST_READ = "lastRead"
    PROGRESS = "progress"
    RATING = "rating"
    CREATED_AT = "createdAt"


def matches_query(title: Title, query: str) -> bool:
    """Case-insensitive substring match against name, author and tags."""
    term = query.lower()
    if term in title.name.lower() or term in title.author.lower():
        return True
    return any(term in tag.lower() for tag in title.tags)


def filter_titles(
    titles: Iterable[Title],
    query: str = "",
    status: Optional[Union[ReadingStatus, str]] = None,
    kind: Optional[Union[MangaKind, str]] = None,
    tags: Optional[Iterable[str]] = None,
) -> List[Title]:
    """Narrow ``titles`` by text query, exact status/kind and any-of tags.

    Empty filter values are ignored. Raises ValueError for an unknown
    status or kind string.
    """
    results = list(titles)

    if query:
        results = [t for t in results if matches_query(t, query)]

    if status:
        wanted_status = ReadingStatus(status)
        results = [t for t in results if t.status == wanted_status]

    if kind:
        wanted_kind = MangaKind(kind)
        results = [t for t in results if t.kind == wanted_kind]

    wanted_tags = set(tags or ())
    if wanted_tags:
        results = [t for t in results if wanted_tags.intersection(t.tags)]

    return results


def sort_titles(titles: Iterable[Title], sort_key: Union[SortKey, str]) -> List[Title]:
    """Return a sorted copy.

    ``title`` sorts A-Z; ``lastRead``, ``rating`` and ``createdAt`` newest or
    highest first; ``progress`` by read fraction, highest first.
    """
    key = SortKey(sort_key)
    items = list(titles)
    if key is SortKey.TITLE:
        return sorted(items, key=lambda t: t.name.casefold())
    if key is SortKey.LAST_READ:
        return sorted(items, key=lambda t: as_utc(t.last_progress_at) or _EPOCH, reverse=True)
    if key is SortKey.PROGRESS:
        return sorted(items, key=lambda t: t.progress_ratio, reverse=True)
    if key is SortKey.RATING:
        return sorted(items, key=lambda t: t.rating or 0, reverse=True)
    return sorted(items, key=lambda t: t.created_at, reverse=True)
