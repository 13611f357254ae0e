"""HTTP surface of the user directory: middleware and routers."""
