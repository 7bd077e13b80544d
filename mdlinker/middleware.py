from __future__ import annotations

import math
import time
from typing import Any, Callable

from django.conf import settings
from django.core.cache import caches
from django.http import HttpRequest, HttpResponse, JsonResponse

DEFAULT_THROTTLE_LIMIT = 60  # requests
DEFAULT_THROTTLE_WINDOW = 60  # seconds
DEFAULT_THROTTLE_KEY_PREFIX = 'mdlinker:throttle'


class SlidingWindowRateThrottle:
    """Sliding-window rate limiter for named routes, backed by the cache.

    Runs in ``process_view`` because the resolved route is only known once
    URL resolution has happened.
    """

    def __init__(
        self,
        get_response: Callable[[HttpRequest], HttpResponse],
        *,
        limit: int | None = None,
        window: int | None = None,
        cache_alias: str = 'default',
        key_prefix: str | None = None,
    ) -> None:
        self.get_response = get_response
        self.limit = limit or getattr(settings, 'THROTTLE_LIMIT', DEFAULT_THROTTLE_LIMIT)
        self.window = window or getattr(settings, 'THROTTLE_WINDOW', DEFAULT_THROTTLE_WINDOW)
        self.cache = caches[cache_alias]
        self.key_prefix = key_prefix or getattr(settings, 'THROTTLE_KEY_PREFIX', DEFAULT_THROTTLE_KEY_PREFIX)

    def __call__(self, request: HttpRequest) -> HttpResponse:
        return self.get_response(request)

    def process_view(
        self,
        request: HttpRequest,
        view_func: Callable[..., Any],
        view_args: tuple,
        view_kwargs: dict,
    ) -> HttpResponse | None:
        if request.method != 'POST':
            return None
        resolved = getattr(request, 'resolver_match', None)
        if resolved is None:
            return None
        if resolved.view_name not in getattr(settings, 'THROTTLED_ROUTES', []):
            return None

        cache_key = f"{self.key_prefix}:{resolved.view_name}:{self._get_client_ip(request)}"
        now = time.time()
        bucket = [stamp for stamp in self.cache.get(cache_key, []) if stamp > now - self.window]
        if len(bucket) >= self.limit:
            retry_after = max(1, math.ceil(bucket[0] + self.window - now))
            return self._reject(resolved.view_name, retry_after)

        bucket.append(now)
        self.cache.set(cache_key, bucket, timeout=self.window)
        return None

    def _get_client_ip(self, request: HttpRequest) -> str:
        header = getattr(settings, 'THROTTLE_IP_HEADER', 'HTTP_X_FORWARDED_FOR')
        if header in request.META:
            return request.META[header].split(',')[0].strip()
        return request.META.get('REMOTE_ADDR', '0.0.0.0')

    def _reject(self, view_name: str, retry_after: int) -> HttpResponse:
        response = JsonResponse(
            {'error': 'Rate limit exceeded. Try again shortly.', 'route': view_name},
            status=429,
        )
        response['Retry-After'] = str(retry_after)
        return response



def sliding_window_rate_throttle(get_response: Callable[[HttpRequest], HttpResponse]) -> SlidingWindowRateThrottle:
    return SlidingWindowRateThrottle(get_response)
