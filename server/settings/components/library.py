"""Asset library settings."""

from server.settings.components import BASE_DIR, config

# Inbound uploads are written here before they are committed.
# Must live on the same filesystem as MEDIA_ROOT for atomic promotion.
LIBRARY_STAGING_DIR = config(
    'LIBRARY_STAGING_DIR',
    default=str(BASE_DIR.joinpath('media', '.staging')),
)

# Upload size limit: 50 MB
LIBRARY_MAX_UPLOAD_BYTES = config(
    'LIBRARY_MAX_UPLOAD_BYTES',
    cast=int,
    default=50 * 1024 * 1024,
)

# Staged files older than this are removed by `cleanup_staging`
LIBRARY_STAGING_MAX_AGE_HOURS = config(
    'LIBRARY_STAGING_MAX_AGE_HOURS',
    cast=int,
    default=24,
)
