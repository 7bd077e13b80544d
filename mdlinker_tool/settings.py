"""
Django settings for mdlinker_tool.

The project only serves the JSON linking API: there is no database, no
session or authentication layer and no static files. Everything that
varies between deployments is read from the environment.

Please consult the Django documentation for additional configuration
options: https://docs.djangoproject.com/en/4.2/ref/settings/
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from django.core.exceptions import ImproperlyConfigured

# Build paths inside the project like this: BASE_DIR / 'subdir'.
BASE_DIR = Path(__file__).resolve().parent.parent

# SECURITY WARNING: keep the secret key used in production secret!
SECRET_KEY = os.getenv('DJANGO_SECRET_KEY', 'django-insecure-change-me')

# SECURITY WARNING: don't run with debug turned on in production!
DEBUG = os.getenv('DJANGO_DEBUG', 'false').lower() == 'true'

RUNNING_TESTS = os.getenv('PYTEST_CURRENT_TEST') is not None or 'pytest' in sys.modules
if RUNNING_TESTS:
    DEBUG = True

if not DEBUG and SECRET_KEY == 'django-insecure-change-me' and not RUNNING_TESTS:
    raise ImproperlyConfigured('DJANGO_SECRET_KEY must be set when DEBUG is False.')

ALLOWED_HOSTS: list[str] = [
    host.strip()
    for host in os.getenv('DJANGO_ALLOWED_HOSTS', '127.0.0.1,localhost,testserver').split(',')
    if host.strip()
]

# Application definition
INSTALLED_APPS = [
    'corsheaders',
    'mdlinker',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'corsheaders.middleware.CorsMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
    'mdlinker.middleware.sliding_window_rate_throttle',
]

ROOT_URLCONF = 'mdlinker_tool.urls'

WSGI_APPLICATION = 'mdlinker_tool.wsgi.application'

# Results are never persisted.
DATABASES: dict[str, dict[str, object]] = {}

CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
        'LOCATION': 'mdlinker',
    },
}

# Internationalization
# https://docs.djangoproject.com/en/4.2/topics/i18n/

LANGUAGE_CODE = 'en-us'

TIME_ZONE = 'UTC'

USE_I18N = True

USE_TZ = True

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

# Request bodies carry whole articles.
DATA_UPLOAD_MAX_MEMORY_SIZE = int(os.getenv('MDLINKER_MAX_BODY_BYTES', str(5 * 1024 * 1024)))


# Linking engine: YAML file merged over the engine defaults (see engine.yaml).
MDLINKER_ENGINE_CONFIG = os.getenv('MDLINKER_ENGINE_CONFIG', str(BASE_DIR / 'engine.yaml'))

# CORS for the JSON API
MDLINKER_CORS_ALLOWED_ORIGINS: list[str] = [
    origin.strip()
    for origin in os.getenv('MDLINKER_CORS_ALLOWED_ORIGINS', '*').split(',')
    if origin.strip()
]
CORS_ALLOW_ALL_ORIGINS = '*' in MDLINKER_CORS_ALLOWED_ORIGINS
CORS_ALLOWED_ORIGINS = [origin for origin in MDLINKER_CORS_ALLOWED_ORIGINS if origin != '*']
CORS_URLS_REGEX = r'^/api/.*$'
CORS_ALLOW_METHODS = ['OPTIONS', 'POST']
CORS_ALLOW_HEADERS = ['content-type']


# Security headers
SECURE_CONTENT_TYPE_NOSNIFF = True
X_FRAME_OPTIONS = 'DENY'
SECURE_REFERRER_POLICY = 'strict-origin-when-cross-origin'
SECURE_PROXY_SSL_HEADER = ('HTTP_X_FORWARDED_PROTO', 'https')
USE_X_FORWARDED_HOST = True

if not DEBUG:
    SECURE_SSL_REDIRECT = os.getenv('DJANGO_SECURE_SSL_REDIRECT', 'true').lower() == 'true'
    SECURE_HSTS_SECONDS = int(os.getenv('DJANGO_SECURE_HSTS_SECONDS', '31536000'))
    SECURE_HSTS_INCLUDE_SUBDOMAINS = True
    SECURE_HSTS_PRELOAD = True
else:
    SECURE_SSL_REDIRECT = False

# Rate limiting / throttling defaults (per IP per route)
THROTTLED_ROUTES = [
    'mdlinker:process',
]
THROTTLE_LIMIT = int(os.getenv('MDLINKER_THROTTLE_LIMIT', '60'))
THROTTLE_WINDOW = int(os.getenv('MDLINKER_THROTTLE_WINDOW', '60'))
THROTTLE_IP_HEADER = os.getenv('MDLINKER_THROTTLE_HEADER', 'HTTP_X_FORWARDED_FOR')
THROTTLE_KEY_PREFIX = 'mdlinker:throttle'


log_level = os.getenv('DJANGO_LOG_LEVEL', 'INFO').upper()
LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'simple': {
            'format': '%(asctime)s %(levelname)s %(name)s: %(message)s',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'simple',
        },
    },
    'root': {
        'handlers': ['console'],
        'level': log_level,
    },
    'loggers': {
        'django': {
            'handlers': ['console'],
            'level': log_level,
            'propagate': False,
        },
        'mdlinker': {
            'handlers': ['console'],
            'level': os.getenv('MDLINKER_LOG_LEVEL', log_level).upper(),
            'propagate': False,
        },
    },
}
