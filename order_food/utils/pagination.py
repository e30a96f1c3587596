from __future__ import annotations

from typing import List, Optional

from order_food.schemas.common_schemas import Link, PaginationMeta

# offset (page - 1) x perPage doit tenir dans un entier SQL 64 bits
MAX_PAGE_NUMBER = 1_000_000


def parse_positive_int(value: Optional[str], default: int, maximum: int = MAX_PAGE_NUMBER) -> int:
    """Entier entre 1 et `maximum`, sinon la valeur par défaut (absent, non numérique ou < 1)."""
    if value is None or value == "":
        return default
    try:
        result = int(value)
    except (TypeError, ValueError):
        return default
    if result < 1:
        return default
    return min(result, maximum)


def total_pages(total_items: int, per_page: int) -> int:
    return max(1, -(-total_items // per_page))


def build_pagination_meta(page: int, per_page: int, total_items: int) -> PaginationMeta:
    return PaginationMeta(
        page=page,
        per_page=per_page,
        total_pages=total_pages(total_items, per_page),
        total_items=total_items,
    )


def build_pagination_links(page: int, pages: int, base_path: str, per_page: int) -> List[Link]:
    links = [Link(href=f"{base_path}?page={page}&perPage={per_page}", rel="self")]

    if page > 1:
        links.append(Link(href=f"{base_path}?page=1&perPage={per_page}", rel="first"))
        links.append(Link(href=f"{base_path}?page={page - 1}&perPage={per_page}", rel="prev"))

    if page < pages:
        links.append(Link(href=f"{base_path}?page={page + 1}&perPage={per_page}", rel="next"))
        links.append(Link(href=f"{base_path}?page={pages}&perPage={per_page}", rel="last"))

    return links
