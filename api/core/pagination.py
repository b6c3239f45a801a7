"""Page/offset arithmetic shared by list endpoints."""

import math

from sqlalchemy import Select


def page_offset(limit: int, page: int) -> int:
    """Row offset for a 1-indexed page."""
    return (page - 1) * limit


def paginate[T: Select](stmt: T, limit: int, page: int) -> T:
    """Apply LIMIT/OFFSET for a 1-indexed page to a select statement."""
    return stmt.offset(page_offset(limit, page)).limit(limit)


def calculate_total_pages(total_rows: int, limit: int) -> int:
    """ceil(total_rows / limit); 0 when there are no rows.

    Raises:
        ValueError: If limit is not positive.
    """
    if limit < 1:
        raise ValueError(f"limit must be >= 1, got {limit}")
    return math.ceil(total_rows / limit)
