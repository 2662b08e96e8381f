from pydantic import ConfigDict

from trader_goods_stub.models import WireModel


class PageDescriptor(WireModel):
    model_config = ConfigDict(frozen=True)

    total_records: int
    current_page: int
    total_pages: int
    next_page: int | None
    previous_page: int | None


def compute_pagination(total_records: int, page: int, size: int) -> PageDescriptor:
    """Derive the page descriptor for a zero-based ``page`` of ``size`` records.

    A page past the end is clamped down to the last page (page 0 when there
    are no records) instead of being rejected. ``size`` must be positive and
    ``page`` non-negative; both are checked at the HTTP boundary.
    """
    total_pages = -(-total_records // size)
    current_page = min(page, max(total_pages, 1) - 1)
    return PageDescriptor(
        total_records=total_records,
        current_page=current_page,
        total_pages=total_pages,
        next_page=current_page + 1 if current_page + 1 < total_pages else None,
        previous_page=current_page - 1 if current_page > 0 else None,
    )
