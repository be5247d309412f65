"""Infrastructure layer for library app.

This package contains integrations with external systems:
- Content classification (MIME type allow-list)
- Staging area for inbound uploads
- Local filesystem storage for committed assets
- Filename sanitizing and storage path generation

Keep infrastructure concerns separate from business logic.
"""
