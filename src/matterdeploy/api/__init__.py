"""HTTP API for validating descriptors and rendering deployment documents."""
