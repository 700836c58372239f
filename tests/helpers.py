from datetime import date
from decimal import Decimal

from cabana.models import Orcamento, PacotePegueMonte

ADMIN_PASSWORD = 'senha-do-painel'
ADMIN_HEADERS = {'HTTP_X_ADMIN_PASSWORD': ADMIN_PASSWORD}

GIF_BYTES = (
    b'GIF89a\x01\x00\x01\x00\x80\x00\x00\x00\x00\x00\xff\xff\xff!\xf9\x04\x01\x00\x00\x00\x00,'
    b'\x00\x00\x00\x00\x01\x00\x01\x00\x00\x02\x02D\x01\x00;'
)


def make_order(**overrides):
    data = {
        'nome': 'Maria Souza',
        'whatsapp': '(16) 99999-1234',
        'email': 'maria@example.com',
        'data_festa': date(2026, 11, 20),
        'horario': '19:00',
        'qtd_criancas': 6,
        'tema': 'Safari',
        'valor_final': Decimal('1000.00'),
    }
    data.update(overrides)
    return Orcamento.objects.create(**data)


def make_pacote(**overrides):
    data = {
        'nome': 'Pegue e Monte Safari',
        'valor': Decimal('250.00'),
    }
    data.update(overrides)
    return PacotePegueMonte.objects.create(**data)


def approved_payment(order_id, kind, amount, payment_id='9001', status='approved'):
    return {
        'id': payment_id,
        'status': status,
        'status_detail': 'accredited',
        'external_reference': f'{order_id}__{kind}',
        'transaction_amount': amount,
    }
