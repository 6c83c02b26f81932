"""Module __init__: shared utility functions."""
#
# KEY MODULES:
# - **async_helpers.py**: subprocess and thread helpers for the async pipeline
#
