"""User management module: user profile records and their identity resolution."""
