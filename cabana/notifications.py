import json
import logging
from urllib import error, request as urllib_request

from django.conf import settings
from django.core.mail import send_mail
from django.utils import timezone

from .models import PagamentoOrcamento

logger = logging.getLogger(__name__)


def normalize_whatsapp_phone(value):
    digits = ''.join(ch for ch in (value or '') if ch.isdigit())
    if not digits:
        return ''
    digits = digits.lstrip('0')
    if digits.startswith('55'):
        return digits
    if len(digits) in {10, 11}:
        return f'55{digits}'
    return digits


def _wapi_send_text(phone, message):
    instance_id = (settings.WAPI_INSTANCE_ID or '').strip()
    token = (settings.WAPI_TOKEN or '').strip()
    if not instance_id or not token:
        raise ValueError('W-API nao configurada. Defina WAPI_INSTANCE_ID e WAPI_TOKEN.')

    url = f'https://api.w-api.app/v1/message/send-text?instanceId={instance_id}'
    payload = {
        'phone': phone,
        'message': message,
    }
    req = urllib_request.Request(
        url=url,
        data=json.dumps(payload).encode('utf-8'),
        headers={
            'Authorization': f'Bearer {token}',
            'Content-Type': 'application/json',
            'Accept': 'application/json',
        },
        method='POST',
    )
    try:
        with urllib_request.urlopen(req, timeout=30) as response:
            if response.status != 200:
                raise ValueError(f'W-API retornou HTTP {response.status}.')
    except error.HTTPError as exc:
        body = exc.read().decode('utf-8', 'ignore')
        raise ValueError(f'Erro W-API HTTP {exc.code}: {body}') from exc
    except error.URLError as exc:
        raise ValueError(f'Erro de rede W-API: {exc.reason}') from exc


def build_payment_message(pagamento):
    order = pagamento.orcamento
    lines = [
        'Pagamento confirmado!',
        f'Pedido #{order.id}',
        f'Cliente: {order.nome}',
        f'Pagamento: {pagamento.get_tipo_display()}',
        f'Valor: R$ {pagamento.valor:.2f}',
    ]
    if order.data_festa:
        lines.append(f'Data da festa: {order.data_festa:%d/%m/%Y} {order.horario}'.rstrip())
    if order.status_pagamento == order.PAGAMENTO_PARCIAL:
        restante = order.total_a_pagar - pagamento.valor
        if restante > 0:
            lines.append(f'Restante a pagar: R$ {restante:.2f}')

    lines.extend(
        [
            '',
            'Obrigado por escolher a Cabana de Brincar!',
        ]
    )
    return '\n'.join(lines)


def notify_payment_confirmed(pagamento_id):
    # Only the first caller to flip notificado_em sends anything.
    updated = PagamentoOrcamento.objects.filter(id=pagamento_id, notificado_em__isnull=True).update(
        notificado_em=timezone.now(),
        notificacao_erro='',
    )
    if updated == 0:
        return

    pagamento = PagamentoOrcamento.objects.select_related('orcamento').get(id=pagamento_id)
    order = pagamento.orcamento
    message = build_payment_message(pagamento)
    errors = []

    if order.email:
        try:
            send_mail(
                subject=f'Pagamento confirmado - Pedido #{order.id}',
                message=message,
                from_email=settings.DEFAULT_FROM_EMAIL,
                recipient_list=[order.email],
            )
        except Exception as exc:
            logger.exception('Falha ao enviar email do pagamento %s', pagamento_id)
            errors.append(f'email: {exc}')

    phone = normalize_whatsapp_phone(order.whatsapp)
    if phone and settings.WAPI_INSTANCE_ID and settings.WAPI_TOKEN:
        try:
            _wapi_send_text(phone, message)
        except ValueError as exc:
            logger.warning('Falha ao enviar WhatsApp do pagamento %s: %s', pagamento_id, exc)
            errors.append(str(exc))

    if not order.email and not phone:
        errors.append('Nenhum contato valido para envio.')

    if errors:
        pagamento.notificacao_erro = '; '.join(errors)[:255]
        pagamento.save(update_fields=['notificacao_erro'])
