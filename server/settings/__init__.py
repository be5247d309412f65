"""Main entry point for Django settings.

Settings are split into components under ``server/settings/components``
and glued together with ``django-split-settings``. Values that differ
between environments are read from the environment (or ``config/.env``)
with ``python-decouple``.
"""

import django_stubs_ext
from split_settings.tools import include

# Allow generic admin and manager classes at runtime (ModelAdmin[Model])
django_stubs_ext.monkeypatch()

include(
    'components/common.py',
    'components/logging.py',
    'components/storages.py',
    'components/library.py',
    'components/api.py',
)
