#import wszystkich modeli zeby SQLAlchemy je zarejestrowal w base metadata

from storefront.data.models.cart_line import CartLineModel
from storefront.data.models.address import ShippingAddressModel
from storefront.data.models.order import OrderModel, OrderLineModel

__all__ = ["CartLineModel", "ShippingAddressModel", "OrderModel", "OrderLineModel"]
