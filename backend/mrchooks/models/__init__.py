from .catalog import Product, InventoryRecord
from .sales import Sale, SaleLineItem, Discount
from .ledgers import Expense, Delivery, Loss, UnsoldProduct, PurchaseOrder, PurchaseOrderItem
from .settings import Setting

__all__ = [
    'Product', 'InventoryRecord',
    'Sale', 'SaleLineItem', 'Discount',
    'Expense', 'Delivery', 'Loss', 'UnsoldProduct', 'PurchaseOrder', 'PurchaseOrderItem',
    'Setting',
]
