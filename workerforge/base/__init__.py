"""Module __init__: foundational components shared by every build stage."""
#
# PURPOSE:
# Marks the "base" directory as a Python package.
#
# WHAT'S IN THIS MODULE:
# - config.py: Build configuration (mode, paths, tools, obfuscation options)
#
