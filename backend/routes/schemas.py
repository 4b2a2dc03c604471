from pydantic import BaseModel


class PageMeta(BaseModel):
    """Pagination block shared by every list endpoint."""

    page: int
    limit: int
    total: int
    total_pages: int
