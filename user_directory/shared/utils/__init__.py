"""
Shared utilities: structured logging and format validators.
"""
