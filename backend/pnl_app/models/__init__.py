from .base import Base
from .order import Order, OrderStatusClass, classify_status
from .supplier import Supplier
from .price_entry import PriceEntry
from .shipping import ShippingCost
from .marketing import MarketingSpend
