"""Domain layer of the user management module."""
