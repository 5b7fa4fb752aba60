__all__ = [
    "create_access_token",
    "get_current_user",
    "require_admin",
    "bearer_scheme",
]


def __getattr__(name):
    if name in set(__all__):
        from . import security as _security
        return getattr(_security, name)
    raise AttributeError(f"module 'skillbridge.utils' has no attribute '{name}'")
