import json
import logging
import secrets
import time
from datetime import date
from decimal import Decimal, InvalidOperation
from pathlib import Path

from django import forms
from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import DatabaseError, transaction
from django.db.models import Sum
from django.http import HttpResponse, JsonResponse
from django.shortcuts import get_object_or_404
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from . import mercadopago
from .decorators import admin_required, json_errors
from .models import (
    Cardapio,
    CardapioComposicao,
    CustoFesta,
    CustoGeral,
    Depoimento,
    FotoDepoimento,
    ItemAlimentacao,
    Orcamento,
    PacotePegueMonte,
    PagamentoOrcamento,
    TabelaPreco,
)
from .pegue_monte import parse_pacote_id, release_expired_pickup_packages, release_pacote
from .reconciliation import process_payment_notification, read_notification, run_after_response
from .reports import build_financial_report_pdf, financial_summary
from .updates import DepoimentoUpdate, FinanceiroUpdate, PacoteUpdate, PrecoUpdate, UpdateError

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = {'.jpg', '.jpeg', '.png', '.webp'}


def _json_body(request):
    try:
        data = json.loads(request.body.decode('utf-8') or '{}')
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None
    return data if isinstance(data, dict) else None


def _request_data(request):
    if request.content_type and request.content_type.startswith('multipart/'):
        return {key: request.POST.get(key) for key in request.POST.keys()}
    return _json_body(request)


def _money(value):
    if value is None:
        return None
    return f'{value:.2f}'


def _parse_decimal(value, label):
    try:
        number = Decimal(str(value).strip().replace(',', '.'))
    except InvalidOperation:
        raise ValueError(f'{label} invalido.')
    if not number.is_finite():
        raise ValueError(f'{label} invalido.')
    return number


def _parse_int(value, label):
    if value in (None, ''):
        return 0
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValueError(f'{label} invalido.')
    if number < 0:
        raise ValueError(f'{label} nao pode ser negativo.')
    return number


def _parse_date(value):
    if not value:
        return None
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        raise ValueError('Data da festa invalida. Use o formato AAAA-MM-DD.')


def _as_list(value):
    if value in (None, ''):
        return []
    if isinstance(value, list):
        return value
    if isinstance(value, str):
        try:
            parsed = json.loads(value)
        except json.JSONDecodeError:
            return [part.strip() for part in value.split(',') if part.strip()]
        return parsed if isinstance(parsed, list) else [parsed]
    return [value]


def _validate_image(upload):
    try:
        forms.ImageField().clean(upload)
    except ValidationError:
        raise ValueError(f'O arquivo {upload.name} nao e uma imagem valida.')


def _text(data, key):
    value = data.get(key)
    if value is None:
        return ''
    return str(value).strip()


def _order_payload(order):
    return {
        'id': order.id,
        'nome': order.nome,
        'whatsapp': order.whatsapp,
        'email': order.email,
        'endereco': order.endereco,
        'data_festa': order.data_festa.isoformat() if order.data_festa else None,
        'horario': order.horario,
        'qtd_criancas': order.qtd_criancas,
        'faixa_etaria': order.faixa_etaria,
        'modelo_barraca': order.modelo_barraca,
        'qtd_barracas': order.qtd_barracas,
        'cores': order.cores,
        'tema': order.tema,
        'itens_padrao': order.itens_padrao,
        'itens_adicionais': order.itens_adicionais,
        'alimentacao': order.alimentacao,
        'alergias': order.alergias,
        'status': order.status,
        'status_agenda': order.status_agenda,
        'status_pagamento': order.status_pagamento,
        'valor_final': _money(order.valor_final),
        'valor_itens_extras': _money(order.valor_itens_extras),
        'descricao_itens_extras': order.descricao_itens_extras,
        'custos': _money(order.custos),
        'total_a_pagar': _money(order.total_a_pagar),
        'pacote_pegue_monte_id': order.pacote_pegue_monte_id,
        'tem_token_avaliacao': bool(order.token_avaliacao),
        'data_pedido': order.data_pedido.isoformat() if order.data_pedido else None,
    }


def _preco_payload(preco):
    return {
        'id': preco.id,
        'item_chave': preco.item_chave,
        'descricao': preco.descricao,
        'valor': _money(preco.valor),
        'categoria': preco.categoria,
        'disponivel': preco.disponivel,
    }


def _pacote_payload(pacote):
    return {
        'id': pacote.id,
        'nome': pacote.nome,
        'descricao': pacote.descricao,
        'valor': _money(pacote.valor),
        'status': pacote.status,
        'foto_url': pacote.foto.url if pacote.foto else None,
    }


def _depoimento_payload(depoimento):
    return {
        'id': depoimento.id,
        'orcamento_id': depoimento.orcamento_id,
        'nome_cliente': depoimento.nome_cliente,
        'texto': depoimento.texto,
        'nota': depoimento.nota,
        'aprovado': depoimento.aprovado,
        'fotos': [foto.imagem.url for foto in depoimento.fotos.all()],
        'created_at': depoimento.created_at.isoformat(),
    }


def _custo_payload(custo):
    return {
        'id': custo.id,
        'descricao': custo.descricao,
        'valor': _money(custo.valor),
        'tipo': custo.tipo,
        'categoria': custo.categoria,
        'data': custo.data.isoformat(),
        'orcamento_id': custo.orcamento_id,
        'comprovante_url': custo.comprovante.url if custo.comprovante else None,
    }


def _cardapio_payload(cardapio):
    return {
        'id': cardapio.id,
        'nome': cardapio.nome,
        'descricao': cardapio.descricao,
        'valor_por_pessoa': _money(cardapio.valor_por_pessoa),
        'ativo': cardapio.ativo,
        'itens': [
            {
                'item_id': linha.item_id,
                'nome': linha.item.nome,
                'unidade': linha.item.unidade,
                'quantidade_por_pessoa': f'{linha.quantidade_por_pessoa:.2f}',
            }
            for linha in cardapio.composicao.all()
        ],
    }


def _item_alimentacao_payload(item):
    return {
        'id': item.id,
        'nome': item.nome,
        'unidade': item.unidade,
        'custo_unitario': _money(item.custo_unitario),
        'ativo': item.ativo,
    }


def _customer_fields(data):
    nome = _text(data, 'nome')
    whatsapp = _text(data, 'whatsapp')
    if not nome or not whatsapp:
        raise ValueError('Informe nome e WhatsApp.')
    return {
        'nome': nome,
        'whatsapp': whatsapp,
        'email': _text(data, 'email'),
        'endereco': _text(data, 'endereco'),
        'data_festa': _parse_date(data.get('data_festa')),
        'horario': _text(data, 'horario'),
    }


def _resolve_pacote(data):
    pacote_id = data.get('pacote_id')
    if pacote_id in (None, ''):
        pacote_id = parse_pacote_id(_text(data, 'tema'))
    if pacote_id is None:
        return None
    try:
        return PacotePegueMonte.objects.filter(id=int(pacote_id)).first()
    except (TypeError, ValueError):
        raise ValueError('Pacote informado invalido.')


# ==========================================
#              ROTAS PUBLICAS
# ==========================================


@require_GET
def health(request):
    return JsonResponse({'status': 'ok'})


@require_GET
@json_errors
def itens_disponiveis(request):
    precos = TabelaPreco.objects.filter(
        categoria__in=TabelaPreco.CATEGORIAS_PUBLICAS,
        disponivel=True,
    ).order_by('categoria', 'descricao')
    return JsonResponse(
        [
            {'descricao': preco.descricao, 'categoria': preco.categoria, 'valor': _money(preco.valor)}
            for preco in precos
        ],
        safe=False,
    )


@require_GET
def fotos_galeria(request):
    directory = Path(settings.MEDIA_ROOT) / 'fotos'
    if not directory.is_dir():
        return JsonResponse([], safe=False)
    fotos = sorted(
        entry.name for entry in directory.iterdir() if entry.is_file() and entry.suffix.lower() in IMAGE_EXTENSIONS
    )
    return JsonResponse([f'{settings.MEDIA_URL}fotos/{name}' for name in fotos], safe=False)


@require_GET
@json_errors
def cardapios_publicos(request):
    cardapios = Cardapio.objects.filter(ativo=True).prefetch_related('composicao__item')
    return JsonResponse([_cardapio_payload(cardapio) for cardapio in cardapios], safe=False)


@require_GET
@json_errors
def pacotes_disponiveis(request):
    pacotes = PacotePegueMonte.objects.filter(status=PacotePegueMonte.STATUS_LIBERADO)
    return JsonResponse([_pacote_payload(pacote) for pacote in pacotes], safe=False)


@require_GET
@json_errors
def depoimentos_publicos(request):
    depoimentos = Depoimento.objects.filter(aprovado=True).prefetch_related('fotos')
    return JsonResponse([_depoimento_payload(depoimento) for depoimento in depoimentos], safe=False)


@csrf_exempt
@require_POST
def orcamento_create(request):
    data = _json_body(request)
    if data is None:
        return JsonResponse({'error': 'Corpo da requisicao invalido.'}, status=400)

    try:
        fields = _customer_fields(data)
        fields.update(
            qtd_criancas=_parse_int(data.get('qtd_criancas'), 'Quantidade de criancas'),
            qtd_barracas=_parse_int(data.get('qtd_barracas'), 'Quantidade de barracas'),
        )
        pacote = _resolve_pacote(data)
    except ValueError as exc:
        return JsonResponse({'error': str(exc)}, status=400)

    try:
        order = Orcamento.objects.create(
            faixa_etaria=_text(data, 'faixa_etaria'),
            modelo_barraca=_text(data, 'modelo_barraca'),
            cores=_text(data, 'cores'),
            tema=_text(data, 'tema'),
            itens_padrao=_as_list(data.get('itens_padrao')),
            itens_adicionais=_as_list(data.get('itens_adicionais')),
            alimentacao=_as_list(data.get('alimentacao')),
            alergias=_text(data, 'alergias'),
            pacote_pegue_monte=pacote,
            **fields,
        )
    except DatabaseError:
        logger.exception('Erro ao salvar pedido de orcamento')
        return JsonResponse({'error': 'Nao foi possivel salvar o pedido.'}, status=500)

    logger.info('Novo orcamento #%s recebido de %s', order.id, order.nome)
    return JsonResponse({'success': True, 'id': order.id}, status=201)


@csrf_exempt
@require_POST
@json_errors
def pegue_monte_checkout(request, pacote_id):
    pacote = get_object_or_404(PacotePegueMonte, id=pacote_id)
    if pacote.status != PacotePegueMonte.STATUS_LIBERADO:
        return JsonResponse({'error': 'Este pacote nao esta disponivel no momento.'}, status=400)

    data = _json_body(request)
    if data is None:
        return JsonResponse({'error': 'Corpo da requisicao invalido.'}, status=400)
    try:
        fields = _customer_fields(data)
    except ValueError as exc:
        return JsonResponse({'error': str(exc)}, status=400)

    order = Orcamento.objects.create(
        tema=f'Pegue e Monte - {pacote.nome} (ID: {pacote.id})',
        valor_final=pacote.valor,
        pacote_pegue_monte=pacote,
        **fields,
    )
    link = mercadopago.create_checkout_link(
        f'Pegue e Monte - {pacote.nome}',
        pacote.valor,
        order.id,
        PagamentoOrcamento.TIPO_PEGUE_MONTE,
    )
    if not link:
        order.delete()
        return JsonResponse({'error': 'Nao foi possivel gerar o link de pagamento.'}, status=502)

    return JsonResponse({'order_id': order.id, 'valor': _money(pacote.valor), 'link': link}, status=201)


@csrf_exempt
@require_POST
def payments_webhook(request):
    notification = read_notification(request)
    if notification['is_payment'] and notification['payment_id']:
        run_after_response(
            process_payment_notification,
            notification['payment_id'],
            notification['signature'],
            notification['request_id'],
        )
    else:
        logger.info('Webhook ignorado (pagamento=%s, id=%r)', notification['is_payment'], notification['payment_id'])
    return JsonResponse({'ok': True})


@csrf_exempt
@require_http_methods(['GET', 'POST'])
@json_errors
def feedback(request, token):
    if request.method == 'GET':
        order = get_object_or_404(Orcamento, token_avaliacao=token)
        return JsonResponse({'nome': order.nome})

    texto = request.POST.get('texto', '').strip()
    if not texto:
        return JsonResponse({'error': 'Escreva seu depoimento antes de enviar.'}, status=400)

    nota = request.POST.get('nota', '').strip()
    if nota:
        try:
            nota = int(nota)
        except ValueError:
            nota = 0
        if not 1 <= nota <= 5:
            return JsonResponse({'error': 'A nota deve ser de 1 a 5.'}, status=400)
    else:
        nota = None

    fotos = request.FILES.getlist('fotos')
    if len(fotos) > settings.FEEDBACK_MAX_FOTOS:
        return JsonResponse(
            {'error': f'Envie no maximo {settings.FEEDBACK_MAX_FOTOS} fotos.'},
            status=400,
        )
    try:
        for foto in fotos:
            _validate_image(foto)
    except ValueError as exc:
        return JsonResponse({'error': str(exc)}, status=400)

    with transaction.atomic():
        order = Orcamento.objects.select_for_update().filter(token_avaliacao=token).first()
        if order is None:
            return JsonResponse({'error': 'Link de avaliacao invalido ou ja utilizado.'}, status=404)

        depoimento = Depoimento.objects.create(
            orcamento=order,
            nome_cliente=order.nome,
            texto=texto,
            nota=nota,
            aprovado=False,
        )
        for foto in fotos:
            FotoDepoimento.objects.create(depoimento=depoimento, imagem=foto)

        order.token_avaliacao = None
        order.save(update_fields=['token_avaliacao'])

    logger.info('Depoimento #%s recebido do orcamento #%s com %s foto(s)', depoimento.id, order.id, len(fotos))
    return JsonResponse({'success': True, 'id': depoimento.id}, status=201)


# ==========================================
#           ROTAS DO PAINEL (ADMIN)
# ==========================================


@require_GET
@admin_required
@json_errors
def admin_pedidos(request):
    orders = Orcamento.objects.all().order_by('-data_pedido')
    return JsonResponse([_order_payload(order) for order in orders], safe=False)


@csrf_exempt
@require_http_methods(['DELETE'])
@admin_required
@json_errors
def admin_pedido(request, order_id):
    order = get_object_or_404(Orcamento, id=order_id)
    with transaction.atomic():
        holds_pacote = (
            order.pacote_pegue_monte_id
            and order.status_pagamento == Orcamento.PAGAMENTO_PAGO
            and order.status_agenda != Orcamento.AGENDA_CONCLUIDO
        )
        if holds_pacote:
            release_pacote(order.pacote_pegue_monte_id)
        order.delete()
    logger.info('Orcamento #%s excluido', order_id)
    return JsonResponse({'success': True})


@csrf_exempt
@require_http_methods(['PUT'])
@admin_required
@json_errors
def admin_pedido_status(request, order_id):
    order = get_object_or_404(Orcamento, id=order_id)
    data = _json_body(request)
    if data is None:
        return JsonResponse({'error': 'Corpo da requisicao invalido.'}, status=400)

    status = _text(data, 'status').lower()
    if status == Orcamento.STATUS_APROVADO:
        order.status = Orcamento.STATUS_APROVADO
        if order.status_agenda != Orcamento.AGENDA_CONCLUIDO:
            order.status_agenda = Orcamento.AGENDA_AGENDADO
        order.save(update_fields=['status', 'status_agenda'])
    elif status == Orcamento.AGENDA_CONCLUIDO:
        if order.status_agenda not in {Orcamento.AGENDA_AGENDADO, Orcamento.AGENDA_CONCLUIDO}:
            return JsonResponse({'error': 'Aprove e agende o pedido antes de concluir.'}, status=400)
        valores = {
            key: data[key]
            for key in ('valor_final', 'valor_itens_extras', 'descricao_itens_extras')
            if key in data
        }
        try:
            update = FinanceiroUpdate.from_payload(valores) if valores else None
        except UpdateError as exc:
            return JsonResponse({'error': str(exc)}, status=400)
        with transaction.atomic():
            if update:
                update.apply(order)
            order.status_agenda = Orcamento.AGENDA_CONCLUIDO
            order.save(update_fields=['status_agenda'])
    elif status == Orcamento.STATUS_PENDENTE:
        order.status = Orcamento.STATUS_PENDENTE
        order.save(update_fields=['status'])
    else:
        return JsonResponse({'error': 'Status invalido.'}, status=400)

    return JsonResponse({'success': True, 'pedido': _order_payload(order)})


@csrf_exempt
@require_http_methods(['PUT'])
@admin_required
@json_errors
def admin_pedido_financeiro(request, order_id):
    order = get_object_or_404(Orcamento, id=order_id)
    try:
        FinanceiroUpdate.from_payload(_json_body(request)).apply(order)
    except UpdateError as exc:
        return JsonResponse({'error': str(exc)}, status=400)
    return JsonResponse({'success': True, 'pedido': _order_payload(order)})


@require_GET
@admin_required
@json_errors
def admin_pedido_pagamentos(request, order_id):
    order = get_object_or_404(Orcamento, id=order_id)
    return JsonResponse(
        [
            {
                'id': pagamento.id,
                'tipo': pagamento.tipo,
                'valor': _money(pagamento.valor),
                'metodo': pagamento.metodo,
                'mp_payment_id': pagamento.mp_payment_id,
                'data_pagamento': pagamento.data_pagamento.isoformat(),
                'notificado_em': pagamento.notificado_em.isoformat() if pagamento.notificado_em else None,
                'notificacao_erro': pagamento.notificacao_erro,
            }
            for pagamento in order.pagamentos.all()
        ],
        safe=False,
    )


@csrf_exempt
@require_http_methods(['GET', 'POST'])
@admin_required
@json_errors
def admin_pedido_custos(request, order_id):
    order = get_object_or_404(Orcamento, id=order_id)
    if request.method == 'POST':
        data = _json_body(request)
        if data is None:
            return JsonResponse({'error': 'Corpo da requisicao invalido.'}, status=400)
        descricao = _text(data, 'descricao')
        try:
            valor = _parse_decimal(data.get('valor'), 'Valor')
        except ValueError as exc:
            return JsonResponse({'error': str(exc)}, status=400)
        if not descricao or valor <= 0:
            return JsonResponse({'error': 'Informe descricao e valor maior que zero.'}, status=400)
        CustoFesta.objects.create(orcamento=order, descricao=descricao, valor=valor)

    custos = order.custos_festa.all()
    total = custos.aggregate(total=Sum('valor')).get('total') or Decimal('0.00')
    return JsonResponse(
        {
            'custos': [
                {'id': custo.id, 'descricao': custo.descricao, 'valor': _money(custo.valor)} for custo in custos
            ],
            'total': _money(total),
        },
        status=201 if request.method == 'POST' else 200,
    )


@csrf_exempt
@require_http_methods(['DELETE'])
@admin_required
@json_errors
def admin_custo_festa(request, custo_id):
    get_object_or_404(CustoFesta, id=custo_id).delete()
    return JsonResponse({'success': True})


@csrf_exempt
@require_POST
@admin_required
@json_errors
def admin_gerar_links(request, order_id):
    order = get_object_or_404(Orcamento, id=order_id)
    try:
        offers = mercadopago.split_payment_offers(order.total_a_pagar)
    except ValueError as exc:
        return JsonResponse({'error': str(exc)}, status=400)

    festa = f'Festa #{order.id} - {order.nome}'
    links = {
        'linkReserva': mercadopago.create_checkout_link(
            f'Reserva 50% - {festa}', offers['reserva'], order.id, PagamentoOrcamento.TIPO_SINAL
        ),
        'linkRestante': mercadopago.create_checkout_link(
            f'Restante 50% - {festa}', offers['restante'], order.id, PagamentoOrcamento.TIPO_RESTANTE
        ),
        'linkIntegral': mercadopago.create_checkout_link(
            f'Pagamento integral (5% off) - {festa}', offers['integral'], order.id, PagamentoOrcamento.TIPO_INTEGRAL
        ),
    }
    if not all(links.values()):
        return JsonResponse({'error': 'Nao foi possivel gerar os links no Mercado Pago.'}, status=502)

    return JsonResponse(
        {
            'total': _money(offers['total']),
            'reserva': _money(offers['reserva']),
            'restante': _money(offers['restante']),
            'integral': _money(offers['integral']),
            **links,
        }
    )


@csrf_exempt
@require_POST
@admin_required
@json_errors
def admin_gerar_token(request, order_id):
    order = get_object_or_404(Orcamento, id=order_id)
    order.token_avaliacao = secrets.token_urlsafe(24)
    order.save(update_fields=['token_avaliacao'])
    url = f'{mercadopago.site_base_url()}/feedback.html?t={order.token_avaliacao}'
    return JsonResponse({'token': order.token_avaliacao, 'url': url})


@csrf_exempt
@require_http_methods(['GET', 'POST'])
@admin_required
@json_errors
def admin_precos(request):
    if request.method == 'GET':
        return JsonResponse([_preco_payload(preco) for preco in TabelaPreco.objects.all()], safe=False)

    data = _json_body(request)
    if data is None:
        return JsonResponse({'error': 'Corpo da requisicao invalido.'}, status=400)
    descricao = _text(data, 'descricao')
    categoria = _text(data, 'categoria')
    try:
        valor = _parse_decimal(data.get('valor'), 'Valor')
    except ValueError as exc:
        return JsonResponse({'error': str(exc)}, status=400)
    if not descricao or not categoria or valor < 0:
        return JsonResponse({'error': 'Informe descricao, categoria e valor.'}, status=400)

    preco = TabelaPreco.objects.create(
        item_chave=f'custom_{int(time.time() * 1000)}',
        descricao=descricao,
        valor=valor,
        categoria=categoria,
    )
    return JsonResponse({'success': True, 'preco': _preco_payload(preco)}, status=201)


@csrf_exempt
@require_http_methods(['PUT', 'DELETE'])
@admin_required
@json_errors
def admin_preco(request, preco_id):
    preco = get_object_or_404(TabelaPreco, id=preco_id)
    if request.method == 'DELETE':
        preco.delete()
        return JsonResponse({'success': True})

    try:
        PrecoUpdate.from_payload(_json_body(request)).apply(preco)
    except UpdateError as exc:
        return JsonResponse({'error': str(exc)}, status=400)
    return JsonResponse({'success': True, 'preco': _preco_payload(preco)})


@csrf_exempt
@require_http_methods(['GET', 'POST'])
@admin_required
@json_errors
def admin_custos(request):
    if request.method == 'GET':
        custos = CustoGeral.objects.all()
        tipo = request.GET.get('tipo', '').strip()
        if tipo:
            custos = custos.filter(tipo=tipo)
        return JsonResponse([_custo_payload(custo) for custo in custos], safe=False)

    data = _request_data(request)
    if data is None:
        return JsonResponse({'error': 'Corpo da requisicao invalido.'}, status=400)
    descricao = _text(data, 'descricao')
    tipo = _text(data, 'tipo') or CustoGeral.TIPO_DESPESA
    try:
        valor = _parse_decimal(data.get('valor'), 'Valor')
    except ValueError as exc:
        return JsonResponse({'error': str(exc)}, status=400)

    if not descricao or valor <= 0:
        return JsonResponse({'error': 'Preencha descricao e valor maior que zero.'}, status=400)
    if tipo not in {CustoGeral.TIPO_RECEITA, CustoGeral.TIPO_DESPESA}:
        return JsonResponse({'error': 'Tipo de lancamento invalido.'}, status=400)

    custo = CustoGeral(descricao=descricao, valor=valor, tipo=tipo, categoria=_text(data, 'categoria'))
    comprovante = request.FILES.get('comprovante')
    if comprovante:
        custo.comprovante = comprovante
    custo.save()
    return JsonResponse({'success': True, 'custo': _custo_payload(custo)}, status=201)


@csrf_exempt
@require_http_methods(['DELETE'])
@admin_required
@json_errors
def admin_custo(request, custo_id):
    get_object_or_404(CustoGeral, id=custo_id).delete()
    return JsonResponse({'success': True})


@require_GET
@admin_required
@json_errors
def admin_financeiro_resumo(request):
    return JsonResponse({key: _money(value) for key, value in financial_summary().items()})


@require_GET
@admin_required
@json_errors
def admin_financeiro_relatorio(request):
    response = HttpResponse(build_financial_report_pdf(), content_type='application/pdf')
    response['Content-Disposition'] = 'attachment; filename="relatorio_financeiro_cabana.pdf"'
    return response


@require_GET
@admin_required
@json_errors
def admin_depoimentos(request):
    depoimentos = Depoimento.objects.all().prefetch_related('fotos')
    aprovado = request.GET.get('aprovado', '').strip().lower()
    if aprovado in {'true', 'false'}:
        depoimentos = depoimentos.filter(aprovado=aprovado == 'true')
    return JsonResponse([_depoimento_payload(depoimento) for depoimento in depoimentos], safe=False)


@csrf_exempt
@require_http_methods(['PUT', 'DELETE'])
@admin_required
@json_errors
def admin_depoimento(request, depoimento_id):
    depoimento = get_object_or_404(Depoimento, id=depoimento_id)
    if request.method == 'DELETE':
        for foto in depoimento.fotos.all():
            foto.imagem.delete(save=False)
        depoimento.delete()
        return JsonResponse({'success': True})

    try:
        DepoimentoUpdate.from_payload(_json_body(request)).apply(depoimento)
    except UpdateError as exc:
        return JsonResponse({'error': str(exc)}, status=400)
    return JsonResponse({'success': True, 'depoimento': _depoimento_payload(depoimento)})


@csrf_exempt
@require_http_methods(['GET', 'POST'])
@admin_required
@json_errors
def admin_pacotes(request):
    if request.method == 'GET':
        return JsonResponse([_pacote_payload(pacote) for pacote in PacotePegueMonte.objects.all()], safe=False)

    data = _request_data(request)
    if data is None:
        return JsonResponse({'error': 'Corpo da requisicao invalido.'}, status=400)
    nome = _text(data, 'nome')
    try:
        valor = _parse_decimal(data.get('valor'), 'Valor')
    except ValueError as exc:
        return JsonResponse({'error': str(exc)}, status=400)
    if not nome or valor <= 0:
        return JsonResponse({'error': 'Informe nome e valor maior que zero.'}, status=400)

    pacote = PacotePegueMonte(nome=nome, descricao=_text(data, 'descricao'), valor=valor)
    foto = request.FILES.get('foto')
    if foto:
        try:
            _validate_image(foto)
        except ValueError as exc:
            return JsonResponse({'error': str(exc)}, status=400)
        pacote.foto = foto
    pacote.save()
    return JsonResponse({'success': True, 'pacote': _pacote_payload(pacote)}, status=201)


@csrf_exempt
@require_http_methods(['PUT', 'DELETE'])
@admin_required
@json_errors
def admin_pacote(request, pacote_id):
    pacote = get_object_or_404(PacotePegueMonte, id=pacote_id)
    if request.method == 'DELETE':
        pacote.delete()
        return JsonResponse({'success': True})

    try:
        PacoteUpdate.from_payload(_json_body(request)).apply(pacote)
    except UpdateError as exc:
        return JsonResponse({'error': str(exc)}, status=400)
    return JsonResponse({'success': True, 'pacote': _pacote_payload(pacote)})


@csrf_exempt
@require_POST
@admin_required
@json_errors
def admin_liberar_pacotes(request):
    closed = release_expired_pickup_packages()
    return JsonResponse({'success': True, 'orcamentos_concluidos': closed})


@csrf_exempt
@require_http_methods(['GET', 'POST'])
@admin_required
@json_errors
def admin_cardapios(request):
    if request.method == 'GET':
        cardapios = Cardapio.objects.all().prefetch_related('composicao__item')
        return JsonResponse([_cardapio_payload(cardapio) for cardapio in cardapios], safe=False)

    data = _json_body(request)
    if data is None:
        return JsonResponse({'error': 'Corpo da requisicao invalido.'}, status=400)
    nome = _text(data, 'nome')
    try:
        valor = _parse_decimal(data.get('valor_por_pessoa'), 'Valor por pessoa')
    except ValueError as exc:
        return JsonResponse({'error': str(exc)}, status=400)
    if not nome or valor < 0:
        return JsonResponse({'error': 'Informe nome e valor por pessoa.'}, status=400)

    cardapio = Cardapio.objects.create(nome=nome, descricao=_text(data, 'descricao'), valor_por_pessoa=valor)
    return JsonResponse({'success': True, 'cardapio': _cardapio_payload(cardapio)}, status=201)


@csrf_exempt
@require_http_methods(['DELETE'])
@admin_required
@json_errors
def admin_cardapio(request, cardapio_id):
    get_object_or_404(Cardapio, id=cardapio_id).delete()
    return JsonResponse({'success': True})


@csrf_exempt
@require_POST
@admin_required
@json_errors
def admin_cardapio_composicao(request, cardapio_id):
    cardapio = get_object_or_404(Cardapio, id=cardapio_id)
    data = _json_body(request)
    if data is None:
        return JsonResponse({'error': 'Corpo da requisicao invalido.'}, status=400)
    try:
        item_id = _parse_int(data.get('item_id'), 'Item')
        quantidade = _parse_decimal(data.get('quantidade_por_pessoa', '1'), 'Quantidade por pessoa')
    except ValueError as exc:
        return JsonResponse({'error': str(exc)}, status=400)
    item = get_object_or_404(ItemAlimentacao, id=item_id)

    if quantidade <= 0:
        CardapioComposicao.objects.filter(cardapio=cardapio, item=item).delete()
    else:
        CardapioComposicao.objects.update_or_create(
            cardapio=cardapio,
            item=item,
            defaults={'quantidade_por_pessoa': quantidade},
        )
    return JsonResponse({'success': True, 'cardapio': _cardapio_payload(cardapio)})


@csrf_exempt
@require_http_methods(['GET', 'POST'])
@admin_required
@json_errors
def admin_itens_alimentacao(request):
    if request.method == 'GET':
        return JsonResponse([_item_alimentacao_payload(item) for item in ItemAlimentacao.objects.all()], safe=False)

    data = _json_body(request)
    if data is None:
        return JsonResponse({'error': 'Corpo da requisicao invalido.'}, status=400)
    nome = _text(data, 'nome')
    try:
        custo = _parse_decimal(data.get('custo_unitario', '0'), 'Custo unitario')
    except ValueError as exc:
        return JsonResponse({'error': str(exc)}, status=400)
    if not nome or custo < 0:
        return JsonResponse({'error': 'Informe nome e custo unitario.'}, status=400)

    item = ItemAlimentacao.objects.create(nome=nome, unidade=_text(data, 'unidade') or 'un', custo_unitario=custo)
    return JsonResponse({'success': True, 'item': _item_alimentacao_payload(item)}, status=201)


@csrf_exempt
@require_http_methods(['DELETE'])
@admin_required
@json_errors
def admin_item_alimentacao(request, item_id):
    get_object_or_404(ItemAlimentacao, id=item_id).delete()
    return JsonResponse({'success': True})
