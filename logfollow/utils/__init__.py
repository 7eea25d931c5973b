"""Configuration and logging support."""
