# ============================================================================
# workerforge/__init__.py
# Package Marker for the Edge Worker Build Pipeline
# ============================================================================
#
# PURPOSE:
# Turns the static pages under src/assets and the server entry module into
# one deployable worker script (dist/worker.js) plus a zip archive of it
# (dist/worker.zip).
#
# LAYOUT:
# - base/: configuration and logging setup
# - assets/: page discovery, sanitization, script compaction, placeholders
# - build/: bundling, obfuscation, packaging, and the pipeline orchestrator
# - cli/: command line entry point
#
# ============================================================================

__version__ = "1.0.0"
