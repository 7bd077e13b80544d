"""Django views for the mdlinker app.

The app exposes a single JSON endpoint that accepts markdown content and a
sitemap URL and answers with the linked content, the list of inserted links
and summary statistics.
"""

from __future__ import annotations

import json
import logging

from django.http import HttpRequest, HttpResponse, JsonResponse
from django.views.decorators.csrf import csrf_exempt

from .forms import ProcessForm
from .services import process_content

logger = logging.getLogger(__name__)

ALLOWED_METHODS = ('POST', 'OPTIONS')


@csrf_exempt
def process(request: HttpRequest) -> HttpResponse:
    """Insert internal links into the posted content.

    Expects ``{"content": str, "sitemapUrl": str, "options": {...}}``. Missing
    fields are a client error; sitemap and engine failures are not, and
    resolve to the unchanged content with zeroed stats.
    """

    if request.method == 'OPTIONS':
        return HttpResponse(status=204)
    if request.method not in ALLOWED_METHODS:
        response = JsonResponse({'error': 'Method not allowed'}, status=405)
        response['Allow'] = ', '.join(ALLOWED_METHODS)
        return response

    if 'application/json' not in request.headers.get('Content-Type', ''):
        return JsonResponse({'error': 'Content-Type must be application/json'}, status=400)
    try:
        payload = json.loads(request.body or b'{}')
    except (json.JSONDecodeError, UnicodeDecodeError):
        return JsonResponse({'error': 'Request body must be valid JSON'}, status=400)
    if not isinstance(payload, dict):
        return JsonResponse({'error': 'Request body must be a JSON object'}, status=400)

    form = ProcessForm.from_payload(payload)
    if not form.is_valid():
        message = 'Content and sitemap URL are required' if form.missing_required() else 'Invalid request'
        logger.info('Rejected process request: %s', form.errors.as_json())
        return JsonResponse({'error': message, 'details': form.errors.get_json_data()}, status=400)

    content: str = form.cleaned_data['content']
    sitemap_url: str = form.cleaned_data['sitemap_url']
    logger.info('Processing content with sitemap %s (%d characters)', sitemap_url, len(content))
    try:
        result = process_content(content, sitemap_url, form.engine_options())
    except Exception as exc:
        logger.exception('Processing failed for sitemap %s', sitemap_url)
        return JsonResponse({'error': f'Internal server error: {exc}'}, status=500)

    return JsonResponse({'result': result.to_dict()})
