# 📄 File: user_directory/api/middleware/__init__.py
# 🧭 Purpose (Layman Explanation):
# Collects the request-processing layers that wrap every call to the directory.
# 🧪 Purpose (Technical Summary):
# Middleware package exports and per-middleware path exclusion configuration.
# 🔗 Dependencies:
# typing
# 🔄 Connected Modules / Calls From:
# user_directory.main (middleware registration), middleware/logging.py

from typing import Any, Dict

MIDDLEWARE_CONFIG: Dict[str, Dict[str, Any]] = {
    "logging": {
        "enabled": True,
        "exclude_paths": ["/docs", "/redoc", "/openapi.json"],
    },
}


def get_middleware_config(middleware_name: str) -> Dict[str, Any]:
    return MIDDLEWARE_CONFIG.get(middleware_name, {})


def should_exclude_path(middleware_name: str, path: str) -> bool:
    """
    Check if a path should be excluded from middleware processing.

    Args:
        middleware_name: Name of the middleware
        path: Request path to check

    Returns:
        True for exact or prefix matches of an excluded path
    """
    exclude_paths = get_middleware_config(middleware_name).get("exclude_paths", [])

    for exclude_path in exclude_paths:
        if path == exclude_path or path.startswith(exclude_path + "/"):
            return True

    return False
