"""Admin order status changes.

Cancelling returns each line's quantity to stock in the same Unit of Work as
the status change; if the stock cannot be restored the cancellation is
rolled back.
"""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.catalogue.product import Product
from storefront.domain import storefront
from storefront.ordering.order import Order, OrderStatus
from storefront.shared.errors import StockConflict
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@storefront.command(part_of="Order")
class ChangeOrderStatus:
    order_id = Identifier(required=True)
    status = String(required=True, max_length=50)
    changed_by = Identifier()


@storefront.command_handler(part_of=Order)
class OrderStatusHandler:
    @handle(ChangeOrderStatus)
    def change_status(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)

        if not order.change_status(command.status, changed_by=command.changed_by):
            return str(order.id)

        if order.status == OrderStatus.CANCELLED.value:
            products = current_domain.repository_for(Product)
            for item in order.items:
                if not products.release(item.product_id, item.quantity):
                    raise StockConflict(item.product_id)

        repo.add(order)
        logger.info(
            "order_status_changed",
            order_id=str(order.id),
            status=order.status,
            changed_by=command.changed_by,
        )
        return str(order.id)
