"""Feature domains registered into the runtime context at startup."""
