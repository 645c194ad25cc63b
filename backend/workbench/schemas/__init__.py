"""Pydantic schemas: per-resource document shapes and shared response models."""
