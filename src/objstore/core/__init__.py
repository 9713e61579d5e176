"""Core object storage logic."""
