"""URL configuration for the mdlinker app.

The ``app_name`` allows namespacing from the project URL configuration.
"""

from django.urls import re_path

from . import views

app_name = 'mdlinker'

urlpatterns = [
    re_path(r'^api/process/?$', views.process, name='process'),
]
