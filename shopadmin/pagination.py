"""Page-number window for the product list (e.g. 1 … 4 5 6 7 8 … 20)."""

ELLIPSIS = "…"


def visible_pages(current: int, total: int, window: int = 5) -> list[int | str]:
    """Return the page buttons to show, with ELLIPSIS for skipped ranges."""
    if total <= window:
        return list(range(1, total + 1))

    start = max(1, current - (window - 1) // 2)
    end = min(total, current + window // 2)

    # Keep the window full at either edge
    if end - start + 1 < window:
        if start == 1:
            end = min(total, start + window - 1)
        elif end == total:
            start = max(1, total - window + 1)

    pages: list[int | str] = []
    if start > 1:
        pages.append(1)
        if start > 2:
            pages.append(ELLIPSIS)

    pages.extend(range(start, end + 1))

    if end < total:
        if end < total - 1:
            pages.append(ELLIPSIS)
        pages.append(total)

    return pages
