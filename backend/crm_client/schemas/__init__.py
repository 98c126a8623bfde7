"""Gateway Schemas — Pydantic models validating request bodies at the HTTP boundary."""
