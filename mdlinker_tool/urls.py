"""Root URL configuration for mdlinker_tool."""

from django.urls import include, path

urlpatterns = [
    path('', include('mdlinker.urls')),
]
