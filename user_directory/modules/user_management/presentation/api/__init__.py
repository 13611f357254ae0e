"""HTTP API of the user management module."""
