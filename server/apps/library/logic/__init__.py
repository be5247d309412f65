"""Business logic layer for library app.

This package contains all business logic for asset operations:
- Commit of staged uploads and descriptive edits
- Deletion of assets and their backing files
- Whole and byte-range delivery of asset content
- Listing, search and statistics over asset metadata

All business logic should be implemented here, separate from
models (data layer), infrastructure (external systems) and views.
"""
