import hashlib
import json
import logging
import os
from decimal import ROUND_HALF_UP, Decimal
from urllib import error, request as urllib_request
from urllib.parse import urlsplit

from django.conf import settings

from .models import PagamentoOrcamento

logger = logging.getLogger(__name__)

MP_API_BASE = 'https://api.mercadopago.com'
REFERENCE_SEPARATOR = '__'
DEFAULT_SITE_URL = 'http://localhost:8000'
CENTAVOS = Decimal('0.01')
DESCONTO_INTEGRAL = Decimal('0.95')

KNOWN_KINDS = {choice for choice, _label in PagamentoOrcamento.TIPO_CHOICES}


class MercadoPagoError(ValueError):
    pass


def _mp_access_token():
    return (settings.MP_ACCESS_TOKEN or '').strip()


def _mp_api_request(method, path, payload=None):
    token = _mp_access_token()
    if not token:
        raise MercadoPagoError('MP_ACCESS_TOKEN nao configurado no servidor.')

    url = f'{MP_API_BASE}{path}'
    headers = {
        'Authorization': f'Bearer {token}',
        'Accept': 'application/json',
    }
    data = None

    if payload is not None:
        headers['Content-Type'] = 'application/json'
        headers['X-Idempotency-Key'] = hashlib.sha256(os.urandom(16)).hexdigest()
        data = json.dumps(payload).encode('utf-8')

    req = urllib_request.Request(url=url, data=data, headers=headers, method=method)
    try:
        with urllib_request.urlopen(req, timeout=settings.MP_TIMEOUT_SECONDS) as response:
            body = response.read().decode('utf-8')
            return json.loads(body) if body else {}
    except error.HTTPError as exc:
        try:
            body = exc.read().decode('utf-8')
            details = json.loads(body)
            message = details.get('message') or details.get('error') or body
        except (ValueError, AttributeError):
            message = str(exc)
        raise MercadoPagoError(f'Erro Mercado Pago: {message}') from exc
    except (error.URLError, TimeoutError) as exc:
        raise MercadoPagoError(f'Falha de rede com Mercado Pago: {exc}') from exc


def site_base_url():
    """Public base URL of the site, always with a scheme and no trailing slash."""
    raw = (settings.SITE_DOMAIN or '').strip().rstrip('/')
    if not raw:
        return DEFAULT_SITE_URL
    if '://' not in raw:
        raw = f'https://{raw}'

    parts = urlsplit(raw)
    if parts.scheme not in {'http', 'https'} or not parts.netloc:
        logger.warning('SITE_DOMAIN invalido (%r), usando %s', settings.SITE_DOMAIN, DEFAULT_SITE_URL)
        return DEFAULT_SITE_URL
    return f'{parts.scheme}://{parts.netloc}{parts.path}'.rstrip('/')


def build_external_reference(order_id, kind):
    return f'{order_id}{REFERENCE_SEPARATOR}{kind}'


def parse_external_reference(reference):
    """Decode ``"<orderId>__<kind>"`` into ``(order_id, kind)``.

    Returns ``None`` for anything that is not a numeric order id followed by
    a known payment kind.
    """
    if not reference or not isinstance(reference, str):
        return None
    order_part, separator, kind = reference.partition(REFERENCE_SEPARATOR)
    if not separator or not order_part.isdigit() or kind not in KNOWN_KINDS:
        return None
    return int(order_part), kind


def split_payment_offers(total):
    total = Decimal(total).quantize(CENTAVOS, rounding=ROUND_HALF_UP)
    if total <= 0:
        raise ValueError('O valor total do pedido precisa ser maior que zero.')

    reserva = (total / 2).quantize(CENTAVOS, rounding=ROUND_HALF_UP)
    return {
        'total': total,
        'reserva': reserva,
        'restante': total - reserva,
        'integral': (total * DESCONTO_INTEGRAL).quantize(CENTAVOS, rounding=ROUND_HALF_UP),
    }


def create_checkout_link(title, amount, order_id, kind):
    """Create a hosted checkout preference and return its URL, or None on failure."""
    amount = Decimal(amount)
    if amount <= 0:
        logger.warning('Link de pagamento recusado para orcamento %s: valor %s', order_id, amount)
        return None

    base_url = site_base_url()
    payload = {
        'items': [
            {
                'title': title[:250],
                'quantity': 1,
                'currency_id': 'BRL',
                'unit_price': float(amount.quantize(CENTAVOS, rounding=ROUND_HALF_UP)),
            }
        ],
        'external_reference': build_external_reference(order_id, kind),
        'back_urls': {
            'success': f'{base_url}/pagamento-sucesso.html',
            'failure': f'{base_url}/pagamento-falha.html',
            'pending': f'{base_url}/pagamento-sucesso.html',
        },
        'auto_return': 'approved',
        'notification_url': f'{base_url}/api/webhook',
    }

    try:
        preference = _mp_api_request('POST', '/checkout/preferences', payload)
    except MercadoPagoError:
        logger.exception('Erro ao criar link %s do orcamento %s', kind, order_id)
        return None

    link = preference.get('init_point')
    if not link:
        logger.error('Mercado Pago nao retornou init_point para orcamento %s (%s)', order_id, kind)
        return None
    return link


def get_payment(payment_id):
    return _mp_api_request('GET', f'/v1/payments/{payment_id}')
