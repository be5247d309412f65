"""URL configuration for library API."""

from django.urls import path

from server.apps.library import views

app_name = 'library'

urlpatterns = [
    path('', views.AssetListAPIView.as_view(), name='asset-list'),
    path('search/', views.AssetSearchAPIView.as_view(), name='asset-search'),
    path('stats/', views.AssetStatsAPIView.as_view(), name='asset-stats'),
    path('upload/', views.AssetUploadAPIView.as_view(), name='asset-upload'),
    path(
        '<int:asset_id>/',
        views.AssetDetailAPIView.as_view(),
        name='asset-detail',
    ),
    path(
        '<int:asset_id>/download/',
        views.AssetDownloadAPIView.as_view(),
        name='asset-download',
    ),
    path(
        '<int:asset_id>/serve/',
        views.AssetServeAPIView.as_view(),
        name='asset-serve',
    ),
]
