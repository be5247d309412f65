"""Django storage configuration for committed assets.

Committed assets are kept on the local filesystem under MEDIA_ROOT so
that promotion from the staging directory never copies data.
"""

from typing import Any, Final

STORAGES: Final[dict[str, dict[str, Any]]] = {
    'default': {
        # No `location` option: the backend follows MEDIA_ROOT
        'BACKEND': 'server.apps.library.infrastructure.storage.FileStorage',
    },
    'staticfiles': {
        # Keep static files separate from library assets
        'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage',
    },
}
