from __future__ import annotations


def owner_id_of(entity) -> object | None:
    """Return the owning customer id of a customer-scoped record, or None."""
    if entity is None:
        return None
    for attr in ("customer_id", "user_id"):
        value = getattr(entity, attr, None)
        if value is not None:
            return value
    order = getattr(entity, "order", None)
    if order is not None and order is not entity:
        return owner_id_of(order)
    return None


def belongs_to(entity, user_id) -> bool:
    """
    Ownership predicate shared by every customer-facing read.

    Payment transactions and order items resolve through their order.
    Ids are compared as strings so a path parameter can be checked directly.
    """
    if user_id is None:
        return False
    owner_id = owner_id_of(entity)
    if owner_id is None:
        return False
    return str(owner_id) == str(user_id)
