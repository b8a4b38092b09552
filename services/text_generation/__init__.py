"""Chat completion service for workshop plans, ideas and ad scripts."""
