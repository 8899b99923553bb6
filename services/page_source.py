"""
SQL page source for paged exports.

Adapts a SQLAlchemy SELECT into the page-fetch callback expected by
ExcelExportService.create_excel_by_page.
"""

import logging
from typing import Any, Callable, List

from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session

from services.partition_service import PageInfo

logger = logging.getLogger(__name__)


def count_rows(session: Session, statement: Select) -> int:
    """Count the rows a statement would return."""
    count_stmt = select(func.count()).select_from(statement.order_by(None).subquery())
    return session.execute(count_stmt).scalar_one()


def query_page_fetcher(
    session: Session,
    statement: Select,
    scalars: bool = True
) -> Callable[[PageInfo], List[Any]]:
    """
    Build a page-fetch callback over a SELECT statement.

    The statement should be ordered (ORDER BY a unique key), otherwise the
    database may return overlapping pages.

    Args:
        session: SQLAlchemy session used for every page query
        statement: Base SELECT statement
        scalars: Return the first column of each row (e.g. ORM entities)
                 instead of Row tuples
    """
    def fetch(page: PageInfo) -> List[Any]:
        page_stmt = statement.offset(page.offset).limit(page.limit)
        result = session.execute(page_stmt)
        rows = result.scalars().all() if scalars else result.all()
        logger.debug(f"Fetched page {page.page_index} (offset={page.offset}, rows={len(rows)})")
        return list(rows)

    return fetch
