"""Sales reports for the main admin."""

from collections import Counter
from decimal import Decimal

from protean.utils.globals import current_domain

from storefront.catalogue.product import Product
from storefront.ordering.order import Order
from storefront.shared.queries import fetch_all

TOP_PRODUCTS_LIMIT = 10


def revenue_stats() -> dict:
    """Revenue and order count over delivered orders."""
    delivered = current_domain.repository_for(Order).delivered()
    return {
        "total_revenue": sum((Decimal(order.total) for order in delivered), Decimal("0.00")),
        "total_orders": len(delivered),
    }


def top_products(limit: int = TOP_PRODUCTS_LIMIT) -> list[dict]:
    """Products ranked by units sold in delivered orders."""
    units = Counter()
    names = {}
    for order in current_domain.repository_for(Order).delivered():
        for item in order.items:
            units[str(item.product_id)] += item.quantity
            names.setdefault(str(item.product_id), item.product_name)

    current_names = {str(p.id): p.name for p in fetch_all(Product)}
    return [
        {
            "product_id": product_id,
            "name": current_names.get(product_id, names[product_id]),
            "units_sold": total,
        }
        for product_id, total in units.most_common(limit)
    ]
