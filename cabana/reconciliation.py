"""Mercado Pago webhook reconciliation.

The webhook view answers 200 right away and hands the payment id to
``process_payment_notification`` on a background worker. Everything after
that point is logged, never reported back to the provider.
"""
import hashlib
import hmac
import json
import logging
from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal

from django.conf import settings
from django.db import IntegrityError, close_old_connections, transaction
from django.utils.crypto import constant_time_compare

from . import mercadopago
from .models import CustoGeral, Orcamento, PagamentoOrcamento
from .notifications import notify_payment_confirmed
from .pegue_monte import reserve_pacote

logger = logging.getLogger(__name__)

APPROVED = 'approved'

_executor = None


def _get_executor():
    global _executor
    if _executor is None:
        _executor = ThreadPoolExecutor(
            max_workers=settings.WEBHOOK_MAX_WORKERS,
            thread_name_prefix='cabana-webhook',
        )
    return _executor


def _run_job(func, *args):
    try:
        func(*args)
    except Exception:
        logger.exception('Falha no processamento em segundo plano de %s%r', func.__name__, args)
    finally:
        close_old_connections()


def run_after_response(func, *args):
    if settings.WEBHOOK_INLINE_PROCESSING:
        try:
            func(*args)
        except Exception:
            logger.exception('Falha no processamento de %s%r', func.__name__, args)
        return
    _get_executor().submit(_run_job, func, *args)


def _load_payload(request):
    try:
        payload = json.loads(request.body.decode('utf-8') or '{}')
    except (json.JSONDecodeError, UnicodeDecodeError):
        return {}
    return payload if isinstance(payload, dict) else {}


def extract_webhook_payment_id(request, payload):
    payment_id = request.GET.get('data.id') or request.GET.get('id')
    if payment_id:
        return str(payment_id)

    data = payload.get('data', {})
    if isinstance(data, dict) and data.get('id'):
        return str(data['id'])
    if payload.get('id'):
        return str(payload['id'])
    return ''


def is_payment_topic(request, payload):
    topic = (
        request.GET.get('type')
        or request.GET.get('topic')
        or payload.get('type')
        or payload.get('topic')
        or ''
    )
    if str(topic).lower() == 'payment':
        return True
    action = str(payload.get('action') or '')
    return action.startswith('payment.')


def is_valid_webhook_signature(payment_id, signature, request_id):
    secret = (settings.MP_WEBHOOK_SECRET or '').strip()
    if not secret:
        return True
    if not signature or not request_id:
        return False

    ts_value = ''
    v1_value = ''
    for part in signature.split(','):
        key, _, value = part.strip().partition('=')
        if key == 'ts':
            ts_value = value
        elif key == 'v1':
            v1_value = value

    if not ts_value or not v1_value:
        return False

    manifest = f'id:{payment_id};request-id:{request_id};ts:{ts_value};'
    expected = hmac.new(secret.encode('utf-8'), manifest.encode('utf-8'), hashlib.sha256).hexdigest()
    return constant_time_compare(expected, v1_value)


def read_notification(request):
    """Pull what the background job needs out of the request before answering."""
    payload = _load_payload(request)
    return {
        'payment_id': extract_webhook_payment_id(request, payload),
        'is_payment': is_payment_topic(request, payload),
        'signature': request.headers.get('x-signature', ''),
        'request_id': request.headers.get('x-request-id', ''),
    }


def process_payment_notification(payment_id, signature='', request_id=''):
    if not is_valid_webhook_signature(payment_id, signature, request_id):
        logger.warning('Webhook com assinatura invalida para pagamento %s', payment_id)
        return None

    try:
        payment_data = mercadopago.get_payment(payment_id)
    except mercadopago.MercadoPagoError:
        logger.exception('Nao foi possivel consultar o pagamento %s no Mercado Pago', payment_id)
        return None

    return reconcile_payment(payment_data)


def _agendar(order):
    order.status = Orcamento.STATUS_APROVADO
    if order.status_agenda != Orcamento.AGENDA_CONCLUIDO:
        order.status_agenda = Orcamento.AGENDA_AGENDADO


def apply_payment_transition(order, tipo):
    if tipo == PagamentoOrcamento.TIPO_SINAL:
        if order.status_pagamento != Orcamento.PAGAMENTO_PAGO:
            order.status_pagamento = Orcamento.PAGAMENTO_PARCIAL
        _agendar(order)
    elif tipo == PagamentoOrcamento.TIPO_RESTANTE:
        order.status_pagamento = Orcamento.PAGAMENTO_PAGO
    elif tipo in {PagamentoOrcamento.TIPO_INTEGRAL, PagamentoOrcamento.TIPO_PEGUE_MONTE}:
        order.status_pagamento = Orcamento.PAGAMENTO_PAGO
        _agendar(order)
    order.save(update_fields=['status', 'status_agenda', 'status_pagamento'])

    if tipo == PagamentoOrcamento.TIPO_PEGUE_MONTE:
        if order.pacote_pegue_monte_id:
            reserve_pacote(order.pacote_pegue_monte_id)
        else:
            logger.warning('Orcamento %s pago como Pegue e Monte sem pacote vinculado', order.id)


def reconcile_payment(payment_data):
    """Apply an approved payment exactly once.

    Returns the new ``PagamentoOrcamento`` or ``None`` when the payment is not
    approved, cannot be matched to an order, or was already processed.
    """
    payment_id = str(payment_data.get('id') or '')
    status = (payment_data.get('status') or '').lower()
    if status != APPROVED:
        logger.info('Pagamento %s com status %r ignorado', payment_id, status)
        return None

    parsed = mercadopago.parse_external_reference(payment_data.get('external_reference'))
    if parsed is None:
        logger.info('Pagamento %s sem referencia externa reconhecida', payment_id)
        return None
    order_id, tipo = parsed
    valor = Decimal(str(payment_data.get('transaction_amount') or '0'))
    if valor <= 0:
        logger.warning('Pagamento %s aprovado sem valor positivo (%s)', payment_id, valor)
        return None

    with transaction.atomic():
        order = Orcamento.objects.select_for_update().filter(id=order_id).first()
        if order is None:
            logger.warning('Pagamento %s referencia orcamento inexistente %s', payment_id, order_id)
            return None

        try:
            with transaction.atomic():
                pagamento = PagamentoOrcamento.objects.create(
                    orcamento=order,
                    valor=valor,
                    tipo=tipo,
                    metodo=PagamentoOrcamento.METODO_MERCADO_PAGO,
                    mp_payment_id=payment_id,
                )
        except IntegrityError:
            logger.info('Pagamento %s do orcamento %s ja processado', tipo, order_id)
            return None

        apply_payment_transition(order, tipo)
        CustoGeral.objects.create(
            descricao=f'{pagamento.get_tipo_display()} - {order.nome}',
            valor=valor,
            tipo=CustoGeral.TIPO_RECEITA,
            categoria='festa',
            orcamento=order,
        )
        transaction.on_commit(lambda: run_after_response(notify_payment_confirmed, pagamento.id))

    logger.info('Pagamento %s (%s) conciliado para orcamento %s: R$ %s', payment_id, tipo, order_id, valor)
    return pagamento
