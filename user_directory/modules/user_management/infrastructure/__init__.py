"""Storage adapters and the record codec for the user directory."""
