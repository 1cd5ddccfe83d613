"""Bounded contexts of the resume generation pipeline."""
