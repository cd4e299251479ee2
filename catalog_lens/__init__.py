"""Catalog lens - pnpm catalog reference resolution.

This package provides tools for:
- Detecting catalog references ("catalog:", "catalog:<name>") in package.json
- Resolving them against the catalogs of pnpm-workspace.yaml
- Caching parsed catalogs until the workspace document changes
- Locating catalog entries for navigation

Usage:
    python -m catalog_lens status                  # Show workspace status
    python -m catalog_lens show                    # Print catalogs
    python -m catalog_lens resolve react catalog:  # Resolve one reference
    python -m catalog_lens hints package.json      # Resolve a manifest
"""

__version__ = "1.0.0"
