import logging
from functools import wraps

from django.conf import settings
from django.db import DatabaseError
from django.http import Http404, JsonResponse
from django.utils.crypto import constant_time_compare

logger = logging.getLogger(__name__)


def _admin_password():
    return (settings.ADMIN_PASSWORD or '').strip()


def admin_required(view_func):
    @wraps(view_func)
    def _wrapped(request, *args, **kwargs):
        informed = request.headers.get('x-admin-password', '')
        expected = _admin_password()
        if not expected or not constant_time_compare(informed, expected):
            return JsonResponse({'message': 'Senha incorreta!'}, status=401)
        return view_func(request, *args, **kwargs)

    return _wrapped


def json_errors(view_func):
    """Turn 404s and storage failures into JSON responses."""

    @wraps(view_func)
    def _wrapped(request, *args, **kwargs):
        try:
            return view_func(request, *args, **kwargs)
        except Http404:
            return JsonResponse({'error': 'Registro nao encontrado.'}, status=404)
        except DatabaseError:
            logger.exception('Erro de banco em %s %s', request.method, request.path)
            return JsonResponse({'error': 'Erro interno ao acessar os dados.'}, status=500)

    return _wrapped
