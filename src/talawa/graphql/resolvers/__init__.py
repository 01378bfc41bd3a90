"""Resolver package for GraphQL schema.

Resolver functions live in sibling modules and are imported lazily by the
types, queries and mutations that expose them.
"""
