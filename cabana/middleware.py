import json
import logging
import re
import time

logger = logging.getLogger('cabana.requests')


SENSITIVE_KEYS = {'password', 'senha', 'token', 'access_token', 'refresh_token', 'secret', 'authorization'}
TOKEN_PATH_RE = re.compile(r'^(/api/feedback/)[^/]+')


def mask_sensitive(data):
    if isinstance(data, dict):
        masked = {}
        for key, value in data.items():
            if str(key).lower() in SENSITIVE_KEYS:
                masked[key] = '***'
            else:
                masked[key] = mask_sensitive(value)
        return masked
    if isinstance(data, list):
        return [mask_sensitive(item) for item in data]
    return data


def _extract_payload(request):
    if request.method in {'GET', 'HEAD', 'OPTIONS'}:
        return ''

    content_type = request.headers.get('Content-Type', '')
    if 'application/json' not in content_type:
        return ''
    try:
        raw = request.body.decode('utf-8', 'ignore')
        if not raw:
            return ''
        data = json.loads(raw)
    except ValueError:
        return ''
    return json.dumps(mask_sensitive(data), ensure_ascii=False)[:2000]


def mask_path(path):
    return TOKEN_PATH_RE.sub(r'\1***', path)


def _client_ip(request):
    forwarded = request.META.get('HTTP_X_FORWARDED_FOR', '')
    if forwarded:
        return forwarded.split(',')[0].strip()[:64]
    return (request.META.get('REMOTE_ADDR') or '')[:64]


class RequestLogMiddleware:
    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        path = request.path or ''
        if not path.startswith('/api/'):
            return self.get_response(request)

        started_at = time.monotonic()
        payload = _extract_payload(request)
        response = self.get_response(request)
        elapsed_ms = int((time.monotonic() - started_at) * 1000)

        level = logging.WARNING if response.status_code >= 400 else logging.INFO
        logger.log(
            level,
            '%s %s -> %s (%sms) ip=%s %s',
            request.method,
            mask_path(path),
            response.status_code,
            elapsed_ms,
            _client_ip(request),
            payload,
        )
        return response
