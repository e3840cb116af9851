"""Configuration, error types and logging shared across citekit."""
