"""
UniGo Core Module

This package contains the ordering core of the campus app:
- db: Database clients (Supabase + Redis)
- cart: generic cart store, controller, checkout submission, sessions
- services: catalog lookup, order gateways, repositories
- auth: Supabase access-token verification
- routers: cafeteria and marketplace HTTP endpoints

Note: Imports are lazy to avoid circular dependency issues
and ensure clean module loading in serverless environments.
"""

__all__ = [
    "get_supabase",
    "get_redis",
]


def __getattr__(name):
    """Lazy attribute access for clean serverless loading."""
    if name == "get_supabase":
        from unigo.db import get_supabase
        return get_supabase
    elif name == "get_redis":
        from unigo.db import get_redis
        return get_redis
    raise AttributeError(f"module 'unigo' has no attribute '{name}'")
