"""
Cart — validation and the caller-facing service.

    from cartsync import cart as Ca

    service = Ca.CartService(provider, policy=policy)
    await service.add_item(user_id, item)
    await service.update_item_quantity(user_id, "phone-1", 2)
    result = await service.checkout(user_id)

    Ca.validate_item({"product_id": "x", ...})   # raises ValidationError
"""

from cartsync.cart._validate import validate_item, validate_quantity, VALID_TYPES
from cartsync.cart._service import CartService, CartSummary

__all__ = (
    "validate_item",
    "validate_quantity",
    "VALID_TYPES",
    "CartService",
    "CartSummary",
)
