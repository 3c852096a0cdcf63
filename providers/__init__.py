"""Oracle and execution providers."""
