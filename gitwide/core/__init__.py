"""Hashing, storage and encoders for content-addressed objects."""
