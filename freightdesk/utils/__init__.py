"""Shared helpers: input validators and filesystem paths."""
