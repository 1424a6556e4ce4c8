from functools import wraps
from flask import g, jsonify

SUPER_ADMIN = "SUPER_ADMIN"
STORE_OWNER = "STORE_OWNER"

def has_role(role_name: str, user=None) -> bool:
    user = user if user is not None else getattr(g, "user", None)
    if not user:
        return False
    return any(r.name == role_name for r in user.roles)

def is_super_admin(user) -> bool:
    return user is not None and has_role(SUPER_ADMIN, user)

def owns_store(user, store_id) -> bool:
    """True if user is the STORE_OWNER of store_id."""
    if user is None or store_id is None or not has_role(STORE_OWNER, user):
        return False
    store = user.store
    return store is not None and store.id == store_id

def can_manage_court(user, court) -> bool:
    return is_super_admin(user) or owns_store(user, court.store_id)

def require_roles(*role_names: str):
    """
    Usage: @require_roles("STORE_OWNER")
    SUPER_ADMIN always passes.
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            user = getattr(g, "user", None)
            if user is None:
                return jsonify(error="Authentication required"), 401

            user_roles = {r.name for r in user.roles}
            if SUPER_ADMIN not in user_roles and not user_roles.intersection(set(role_names)):
                return jsonify(error="Forbidden"), 403

            return fn(*args, **kwargs)
        return wrapper
    return decorator
