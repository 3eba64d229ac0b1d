"""Infrastructure: database engine and state persistence."""
