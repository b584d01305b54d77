import re
from typing import Any, Optional, Sequence, Tuple

from sqlalchemy import Select, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

# OFFSET is bound as a 32-bit integer on PostgreSQL
MAX_OFFSET = 2**31 - 1

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def parse_page(raw: Optional[str]) -> int:
    """
    Page numbers start at 1. Reads the leading integer, so "2.5" and "3abc" are pages 2 and 3.
    Anything non-numeric or below 1 falls back to the first page.
    """
    match = _LEADING_INT.match(raw or "")
    if match is None:
        return 1
    page = int(match.group(1))
    return page if page > 0 else 1


def normalise_search(raw: Optional[str]) -> Optional[str]:
    if raw is None:
        return None
    term = raw.strip()
    return term or None


def search_filter(term: Optional[str], *columns):
    """Case-insensitive substring match on any of `columns`; None when there is nothing to filter on."""
    if not term:
        return None
    return or_(*(col.icontains(term, autoescape=True) for col in columns))


async def paginate(
    db: AsyncSession,
    stmt: Select,
    *,
    page: int,
    per_page: int,
) -> Tuple[Sequence[Any], int]:
    """Run `stmt` for one page and count the full result set with the same filters."""
    total = (
        await db.execute(select(func.count()).select_from(stmt.order_by(None).subquery()))
    ).scalar_one()
    offset = (page - 1) * per_page
    if offset > MAX_OFFSET:
        # past the end of any result set
        return [], total
    result = await db.execute(stmt.offset(offset).limit(per_page))
    return result.scalars().all(), total
