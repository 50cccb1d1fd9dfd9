"""Page/limit validation shared by the paginated read paths."""

from protean.exceptions import ValidationError

MAX_PAGE_SIZE = 100


def check_page(page: int, limit: int) -> int:
    """Validate ``page`` and ``limit`` and return the row offset."""
    if page < 1:
        raise ValidationError({"page": ["Page must be at least 1"]})
    if not 1 <= limit <= MAX_PAGE_SIZE:
        raise ValidationError({"limit": [f"Limit must be between 1 and {MAX_PAGE_SIZE}"]})
    return (page - 1) * limit
