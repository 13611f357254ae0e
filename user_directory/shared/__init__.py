"""
Shared infrastructure for the directory service: configuration, core
exceptions and utilities used by every module.
"""
