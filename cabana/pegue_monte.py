import logging
import re
from datetime import timedelta

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from .models import Orcamento, PacotePegueMonte

logger = logging.getLogger(__name__)

PACOTE_TAG_RE = re.compile(r'ID:\s*(\d+)', re.IGNORECASE)


def parse_pacote_id(tema):
    """Extract the package id from legacy theme text such as ``"Pegue e Monte (ID: 42)"``."""
    match = PACOTE_TAG_RE.search(tema or '')
    if not match:
        return None
    return int(match.group(1))


def reserve_pacote(pacote_id):
    updated = PacotePegueMonte.objects.filter(
        id=pacote_id,
        status=PacotePegueMonte.STATUS_LIBERADO,
    ).update(status=PacotePegueMonte.STATUS_RESERVADO)
    if updated == 0:
        logger.info('Pacote %s nao estava liberado; reserva ignorada', pacote_id)
    return updated == 1


def release_pacote(pacote_id):
    updated = PacotePegueMonte.objects.filter(
        id=pacote_id,
        status=PacotePegueMonte.STATUS_RESERVADO,
    ).update(status=PacotePegueMonte.STATUS_LIBERADO)
    if updated == 0:
        logger.info('Pacote %s nao estava reservado; liberacao ignorada', pacote_id)
    return updated == 1


def release_expired_pickup_packages(today=None):
    """Release packages whose event is at least PICKUP_RELEASE_DAYS in the past.

    Each matching order is marked ``concluido`` so the next sweep skips it.
    Only paid orders hold the reservation, so unpaid ones are closed without
    touching the package. Returns the ids of the orders that were closed.
    """
    today = today or timezone.localdate()
    limite = today - timedelta(days=settings.PICKUP_RELEASE_DAYS)

    expired = (
        Orcamento.objects.filter(pacote_pegue_monte__isnull=False, data_festa__lte=limite)
        .exclude(status_agenda=Orcamento.AGENDA_CONCLUIDO)
        .values_list('id', 'pacote_pegue_monte_id', 'status_pagamento')
    )

    closed = []
    for order_id, pacote_id, status_pagamento in list(expired):
        holds_pacote = status_pagamento == Orcamento.PAGAMENTO_PAGO
        with transaction.atomic():
            if holds_pacote:
                release_pacote(pacote_id)
            updated = (
                Orcamento.objects.filter(id=order_id)
                .exclude(status_agenda=Orcamento.AGENDA_CONCLUIDO)
                .update(status_agenda=Orcamento.AGENDA_CONCLUIDO)
            )
        if updated:
            closed.append(order_id)
            if holds_pacote:
                logger.info('Orcamento %s concluido automaticamente; pacote %s liberado', order_id, pacote_id)
            else:
                logger.info('Orcamento %s sem pagamento concluido automaticamente', order_id)
    return closed
