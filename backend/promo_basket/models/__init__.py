from .catalog import Shop, Article
from .basket import BasketLine, BasketLineAttribute, BasketFreeGoodLink
from .promotions import Promotion, PromotionFreeGood, Voucher, VoucherCode, PromotionCustomerCount
from .orders import Order
from .sessions import ShopperSessionValue

__all__ = [
    'Shop', 'Article',
    'BasketLine', 'BasketLineAttribute', 'BasketFreeGoodLink',
    'Promotion', 'PromotionFreeGood', 'Voucher', 'VoucherCode', 'PromotionCustomerCount',
    'Order',
    'ShopperSessionValue',
]
