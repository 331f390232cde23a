"""Read helpers over Protean repositories."""

from protean.utils.globals import current_domain

PAGE_SIZE = 100


def fetch_all(element_cls, order_by=None, **filters) -> list:
    """Return every record of ``element_cls`` matching ``filters``.

    Protean querysets cap results at one page by default, so this walks
    pages until a short one comes back.
    """
    dao = current_domain.repository_for(element_cls)._dao
    results = []
    offset = 0
    while True:
        queryset = dao.query.filter(**filters) if filters else dao.query
        if order_by:
            queryset = queryset.order_by(order_by)
        page = queryset.offset(offset).limit(PAGE_SIZE).all().items
        results.extend(page)
        if len(page) < PAGE_SIZE:
            return results
        offset += PAGE_SIZE


def fetch_first(element_cls, **filters):
    """Return the first record matching ``filters`` or ``None``."""
    items = current_domain.repository_for(element_cls)._dao.query.filter(**filters).limit(1).all().items
    return items[0] if items else None
