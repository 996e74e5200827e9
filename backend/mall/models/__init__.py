from .auth import User, Role, UserRole
from .tenancy import Wing, Store, StoreStaff
from .catalog import StoreSection, Product, ProductImage, ProductVariant, VariantAttribute, Inventory
from .checkout import Cart, CartItem, Order, OrderItem
from .promotions import Promotion

__all__ = [
    'User', 'Role', 'UserRole',
    'Wing', 'Store', 'StoreStaff',
    'StoreSection', 'Product', 'ProductImage', 'ProductVariant', 'VariantAttribute', 'Inventory',
    'Cart', 'CartItem', 'Order', 'OrderItem',
    'Promotion',
]
