"""Module __init__: bundling, obfuscation, packaging and the build orchestrator."""
