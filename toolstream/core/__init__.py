"""Metadata generation pipeline: hashing, discovery, assembly, orchestration."""
