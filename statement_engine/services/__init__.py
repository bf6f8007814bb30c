"""Classification, validation and monitoring services."""
