"""Page-number pagination over an already scoped SELECT."""

from dataclasses import dataclass

from fastapi import Query
from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from fleetdesk.config import settings


@dataclass
class PageParams:
    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def page_params(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
) -> PageParams:
    return PageParams(page=page, limit=limit)


async def paginate(
    db: AsyncSession, query: Select, params: PageParams
) -> tuple[list, int]:
    """Count and slice `query`.

    Scope and filters must already be applied: the count is taken over the
    same statement that produces the page.
    """
    count_stmt = select(func.count()).select_from(query.order_by(None).subquery())
    total = await db.scalar(count_stmt) or 0

    result = await db.execute(query.offset(params.offset).limit(params.limit))
    return list(result.scalars().all()), total
