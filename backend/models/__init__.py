from models.users import User
from models.category import Category
from models.product import Product
from models.cart import Cart, CartItem
from models.address import Address
from models.coupon import Coupon
from models.order import Order, OrderItem
from models.review import Review
from models.wishlist import Wishlist, WishlistItem
from models.audit_log import AuditLog

__all__ = [
    "User", "Category", "Product", "Cart", "CartItem", "Address", "Coupon",
    "Order", "OrderItem", "Review", "Wishlist", "WishlistItem", "AuditLog",
]
