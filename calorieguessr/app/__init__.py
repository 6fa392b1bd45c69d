"""Application layer: session controller, context wiring and CLI."""
