"""Main URL mapping configuration file."""

from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path('api/assets/', include('server.apps.library.urls')),
    path('admin/', admin.site.urls),
]
