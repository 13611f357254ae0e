# 📄 File: user_directory/shared/config/__init__.py
#
# 🧭 Purpose (Layman Explanation):
# Contains the settings that tell the directory service which storage to talk to
# and how to connect to it.
#
# 🧪 Purpose (Technical Summary):
# Configuration package initialization with exports for settings management
# and storage connection configuration.
#
# 🔄 Connected Modules / Calls From:
# - user_directory.main (application startup)
# - Storage adapters and their factory

"""
Configuration Management Package

Handles all application configuration including:
- Environment-based settings
- SQL (document store) connection configuration
- Redis (key-value store) connection configuration
"""

from .settings import get_settings, Settings

__all__ = [
    "get_settings",
    "Settings",
]
