"""REST API for sum100."""
