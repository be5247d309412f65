"""REST framework configuration for the library API.

See https://www.django-rest-framework.org/api-guide/settings/
"""

from typing import Any, Final

REST_FRAMEWORK: Final[dict[str, Any]] = {
    'DEFAULT_PERMISSION_CLASSES': [
        'rest_framework.permissions.IsAuthenticated',
    ],
    # Basic first so unauthenticated requests get 401, not 403
    'DEFAULT_AUTHENTICATION_CLASSES': [
        'rest_framework.authentication.BasicAuthentication',
        'rest_framework.authentication.SessionAuthentication',
    ],
    'DEFAULT_RENDERER_CLASSES': [
        'rest_framework.renderers.JSONRenderer',
    ],
    'DEFAULT_PARSER_CLASSES': [
        'rest_framework.parsers.JSONParser',
    ],
    'EXCEPTION_HANDLER': (
        'server.apps.library.views.library_exception_handler'
    ),
}
