"""Recipes Catalog Package — categories, ingredients, and versioned recipes.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""
