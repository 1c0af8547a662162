"""Catalog data access and models."""
