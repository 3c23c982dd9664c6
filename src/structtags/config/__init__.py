"""Configuration layer — structtags.toml discovery, settings, and logging."""
