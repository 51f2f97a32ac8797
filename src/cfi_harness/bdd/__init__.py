"""pytest-bdd adapter for the harness.

Importing this package requires pytest and pytest-bdd; the core and the
step catalogue do not.
"""
