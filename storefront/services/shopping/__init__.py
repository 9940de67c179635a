"""Cart and favorites components split by responsibility.

``pricing`` holds the pure totals calculation, ``persistence`` the
identity-keyed storage codec, and ``cart``/``favorites`` the in-memory stores
that react to identity changes.
"""

from .cart import CartStore, StoreStatus
from .favorites import FavoritesStore
from .identity import IdentitySource, SessionIdentity
from .persistence import ShoppingPersistence, parse_stored_list, storage_key
from .pricing import PricingRules, calculate_totals

__all__ = [
    "CartStore",
    "FavoritesStore",
    "IdentitySource",
    "PricingRules",
    "SessionIdentity",
    "ShoppingPersistence",
    "StoreStatus",
    "calculate_totals",
    "parse_stored_list",
    "storage_key",
]
