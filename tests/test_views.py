import json
import shutil
import tempfile
from datetime import date
from decimal import Decimal
from io import StringIO
from unittest.mock import patch

from django.core.files.uploadedfile import SimpleUploadedFile
from django.core.management import call_command
from django.test import TestCase, override_settings

from cabana.middleware import mask_path, mask_sensitive
from cabana.models import (
    Cardapio,
    CustoFesta,
    CustoGeral,
    Depoimento,
    ItemAlimentacao,
    Orcamento,
    PacotePegueMonte,
    PagamentoOrcamento,
    TabelaPreco,
)
from tests.helpers import ADMIN_HEADERS, ADMIN_PASSWORD, GIF_BYTES, make_order, make_pacote


class TempMediaMixin:
    def setUp(self) -> None:
        super().setUp()
        media_root = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, media_root, ignore_errors=True)
        media_override = override_settings(MEDIA_ROOT=media_root)
        media_override.enable()
        self.addCleanup(media_override.disable)


@override_settings(ADMIN_PASSWORD=ADMIN_PASSWORD)
class ApiTestCase(TestCase):
    def put_json(self, url, payload, **extra):
        return self.client.put(url, data=json.dumps(payload), content_type='application/json', **extra)

    def post_json(self, url, payload, **extra):
        return self.client.post(url, data=json.dumps(payload), content_type='application/json', **extra)


class AdminAuthTests(ApiTestCase):
    def test_missing_or_wrong_password_is_rejected(self) -> None:
        for headers in ({}, {'HTTP_X_ADMIN_PASSWORD': 'errada'}):
            response = self.client.get('/api/admin/pedidos', **headers)
            self.assertEqual(response.status_code, 401)
            self.assertEqual(response.json(), {'message': 'Senha incorreta!'})

    @override_settings(ADMIN_PASSWORD='')
    def test_unconfigured_password_locks_panel(self) -> None:
        response = self.client.get('/api/admin/pedidos', HTTP_X_ADMIN_PASSWORD='')
        self.assertEqual(response.status_code, 401)

    def test_correct_password_lists_orders(self) -> None:
        make_order()
        response = self.client.get('/api/admin/pedidos', **ADMIN_HEADERS)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()[0]['nome'], 'Maria Souza')
        self.assertEqual(response.json()[0]['total_a_pagar'], '1000.00')


class OrderIntakeTests(ApiTestCase):
    def test_creates_pending_order(self) -> None:
        response = self.post_json(
            '/api/orcamento',
            {
                'nome': 'Ana Lima',
                'whatsapp': '16999990000',
                'data_festa': '2026-12-05',
                'qtd_criancas': '8',
                'itens_padrao': ['colchonete', 'almofadas'],
                'alimentacao': 'pizza, cafe_manha',
            },
        )

        self.assertEqual(response.status_code, 201)
        order = Orcamento.objects.get(id=response.json()['id'])
        self.assertEqual(order.status, Orcamento.STATUS_PENDENTE)
        self.assertEqual(order.status_pagamento, Orcamento.PAGAMENTO_PENDENTE)
        self.assertIsNone(order.status_agenda)
        self.assertEqual(order.data_festa, date(2026, 12, 5))
        self.assertEqual(order.qtd_criancas, 8)
        self.assertEqual(order.alimentacao, ['pizza', 'cafe_manha'])
        self.assertIsNone(order.pacote_pegue_monte)

    def test_rejects_missing_contact(self) -> None:
        response = self.post_json('/api/orcamento', {'nome': 'Ana Lima'})
        self.assertEqual(response.status_code, 400)
        self.assertFalse(Orcamento.objects.exists())

    def test_rejects_bad_values(self) -> None:
        base = {'nome': 'Ana Lima', 'whatsapp': '16999990000'}
        for extra in ({'data_festa': '05/12/2026'}, {'qtd_criancas': '-1'}, {'qtd_barracas': 'duas'}):
            response = self.post_json('/api/orcamento', {**base, **extra})
            self.assertEqual(response.status_code, 400, extra)

    def test_rejects_malformed_body(self) -> None:
        response = self.client.post('/api/orcamento', data='[1, 2]', content_type='application/json')
        self.assertEqual(response.status_code, 400)

    def test_only_post_is_allowed(self) -> None:
        self.assertEqual(self.client.get('/api/orcamento').status_code, 405)


class PublicCatalogTests(ApiTestCase):
    def test_lists_only_public_available_prices(self) -> None:
        TabelaPreco.objects.create(item_chave='barraca', descricao='Barraca', valor=Decimal('90'), categoria='tendas')
        TabelaPreco.objects.create(item_chave='luzes', descricao='Luzes', valor=Decimal('25'), categoria='adicionais')
        TabelaPreco.objects.create(
            item_chave='pizza', descricao='Pizza', valor=Decimal('18'), categoria='alimentacao', disponivel=False
        )

        response = self.client.get('/api/itens-disponiveis')

        self.assertEqual(response.json(), [{'descricao': 'Barraca', 'categoria': 'tendas', 'valor': '90.00'}])

    def test_only_approved_testimonials_are_public(self) -> None:
        Depoimento.objects.create(nome_cliente='Ana', texto='Amamos!', aprovado=True)
        Depoimento.objects.create(nome_cliente='Bia', texto='Aguardando', aprovado=False)

        response = self.client.get('/api/depoimentos')

        self.assertEqual([item['nome_cliente'] for item in response.json()], ['Ana'])

    def test_active_menus_with_composition(self) -> None:
        cardapio = Cardapio.objects.create(nome='Festa do pijama', valor_por_pessoa=Decimal('30'))
        Cardapio.objects.create(nome='Antigo', valor_por_pessoa=Decimal('20'), ativo=False)
        item = ItemAlimentacao.objects.create(nome='Mini pizza', unidade='un')
        cardapio.composicao.create(item=item, quantidade_por_pessoa=Decimal('2'))

        response = self.client.get('/api/cardapios')

        body = response.json()
        self.assertEqual(len(body), 1)
        self.assertEqual(body[0]['itens'][0]['quantidade_por_pessoa'], '2.00')

    def test_gallery_without_folder_is_empty(self) -> None:
        with override_settings(MEDIA_ROOT=tempfile.gettempdir() + '/cabana-sem-fotos'):
            self.assertEqual(self.client.get('/api/fotos').json(), [])

    def test_health(self) -> None:
        self.assertEqual(self.client.get('/health').json(), {'status': 'ok'})


class OrderStatusTests(ApiTestCase):
    def test_approve_schedules_order(self) -> None:
        order = make_order()

        response = self.put_json(f'/api/admin/pedidos/{order.id}/status', {'status': 'aprovado'}, **ADMIN_HEADERS)

        self.assertEqual(response.status_code, 200)
        order.refresh_from_db()
        self.assertEqual(order.status, Orcamento.STATUS_APROVADO)
        self.assertEqual(order.status_agenda, Orcamento.AGENDA_AGENDADO)

    def test_approve_keeps_completed_schedule(self) -> None:
        order = make_order(status_agenda=Orcamento.AGENDA_CONCLUIDO)

        self.put_json(f'/api/admin/pedidos/{order.id}/status', {'status': 'aprovado'}, **ADMIN_HEADERS)

        order.refresh_from_db()
        self.assertEqual(order.status_agenda, Orcamento.AGENDA_CONCLUIDO)

    def test_complete_records_final_values(self) -> None:
        order = make_order(status_agenda=Orcamento.AGENDA_AGENDADO)

        response = self.put_json(
            f'/api/admin/pedidos/{order.id}/status',
            {
                'status': 'concluido',
                'valor_final': '1100.00',
                'valor_itens_extras': '80',
                'descricao_itens_extras': 'Painel extra',
            },
            **ADMIN_HEADERS,
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['pedido']['total_a_pagar'], '1180.00')
        order.refresh_from_db()
        self.assertEqual(order.status_agenda, Orcamento.AGENDA_CONCLUIDO)
        self.assertEqual(order.valor_final, Decimal('1100.00'))
        self.assertEqual(order.descricao_itens_extras, 'Painel extra')

    def test_complete_with_invalid_value_changes_nothing(self) -> None:
        order = make_order(status_agenda=Orcamento.AGENDA_AGENDADO)

        response = self.put_json(
            f'/api/admin/pedidos/{order.id}/status',
            {'status': 'concluido', 'valor_final': 'mil'},
            **ADMIN_HEADERS,
        )

        self.assertEqual(response.status_code, 400)
        order.refresh_from_db()
        self.assertEqual(order.status_agenda, Orcamento.AGENDA_AGENDADO)

    def test_complete_requires_scheduled_order(self) -> None:
        order = make_order()

        response = self.put_json(
            f'/api/admin/pedidos/{order.id}/status',
            {'status': 'concluido', 'valor_final': '900'},
            **ADMIN_HEADERS,
        )

        self.assertEqual(response.status_code, 400)
        order.refresh_from_db()
        self.assertIsNone(order.status_agenda)
        self.assertEqual(order.status, Orcamento.STATUS_PENDENTE)
        self.assertEqual(order.valor_final, Decimal('1000.00'))

    def test_unknown_status_and_missing_order(self) -> None:
        order = make_order()
        response = self.put_json(f'/api/admin/pedidos/{order.id}/status', {'status': 'cancelado'}, **ADMIN_HEADERS)
        self.assertEqual(response.status_code, 400)

        response = self.put_json('/api/admin/pedidos/99999/status', {'status': 'aprovado'}, **ADMIN_HEADERS)
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {'error': 'Registro nao encontrado.'})


class FinanceiroUpdateTests(ApiTestCase):
    def test_partial_update(self) -> None:
        order = make_order()

        response = self.put_json(
            f'/api/admin/pedidos/{order.id}/financeiro',
            {'custos': '150,50', 'valor_itens_extras': None},
            **ADMIN_HEADERS,
        )

        self.assertEqual(response.status_code, 200)
        order.refresh_from_db()
        self.assertEqual(order.custos, Decimal('150.50'))
        self.assertEqual(order.valor_itens_extras, Decimal('0.00'))
        self.assertEqual(order.valor_final, Decimal('1000.00'))

    def test_unknown_field_is_rejected(self) -> None:
        order = make_order()

        response = self.put_json(
            f'/api/admin/pedidos/{order.id}/financeiro',
            {'valor_final': '10', 'status_pagamento': 'pago'},
            **ADMIN_HEADERS,
        )

        self.assertEqual(response.status_code, 400)
        self.assertIn('status_pagamento', response.json()['error'])
        order.refresh_from_db()
        self.assertEqual(order.valor_final, Decimal('1000.00'))
        self.assertEqual(order.status_pagamento, Orcamento.PAGAMENTO_PENDENTE)

    def test_empty_or_non_object_body_is_rejected(self) -> None:
        order = make_order()
        for payload in ({}, ['valor_final']):
            response = self.put_json(f'/api/admin/pedidos/{order.id}/financeiro', payload, **ADMIN_HEADERS)
            self.assertEqual(response.status_code, 400)


@override_settings(ADMIN_PASSWORD=ADMIN_PASSWORD, MP_ACCESS_TOKEN='token-teste')
class PaymentLinksTests(ApiTestCase):
    @patch('cabana.mercadopago._mp_api_request')
    def test_non_positive_total_is_rejected(self, api_mock) -> None:
        order = make_order(valor_final=Decimal('100.00'), valor_itens_extras=Decimal('-150.00'))

        response = self.client.post(f'/api/admin/gerar-links-mp/{order.id}', **ADMIN_HEADERS)

        self.assertEqual(response.status_code, 400)
        api_mock.assert_not_called()

    @patch('cabana.mercadopago._mp_api_request')
    def test_missing_final_value_is_rejected(self, api_mock) -> None:
        order = make_order(valor_final=None)

        response = self.client.post(f'/api/admin/gerar-links-mp/{order.id}', **ADMIN_HEADERS)

        self.assertEqual(response.status_code, 400)
        api_mock.assert_not_called()

    @patch('cabana.mercadopago._mp_api_request')
    def test_extras_are_included_in_offers(self, api_mock) -> None:
        api_mock.return_value = {'init_point': 'https://mp.example/checkout'}
        order = make_order(valor_final=Decimal('800.00'), valor_itens_extras=Decimal('50.00'))

        response = self.client.post(f'/api/admin/gerar-links-mp/{order.id}', **ADMIN_HEADERS)

        body = response.json()
        self.assertEqual(body['total'], '850.00')
        self.assertEqual(body['reserva'], '425.00')
        self.assertEqual(body['integral'], '807.50')
        self.assertEqual(body['linkIntegral'], 'https://mp.example/checkout')
        titles = [call.args[2]['items'][0]['title'] for call in api_mock.call_args_list]
        self.assertTrue(titles[0].startswith(f'Reserva 50% - Festa #{order.id}'))

    @patch('cabana.mercadopago._mp_api_request')
    def test_provider_failure_returns_502(self, api_mock) -> None:
        api_mock.side_effect = [{'init_point': 'https://mp.example/a'}, {}, {'init_point': 'https://mp.example/c'}]
        order = make_order()

        with self.assertLogs('cabana.mercadopago', level='ERROR'):
            response = self.client.post(f'/api/admin/gerar-links-mp/{order.id}', **ADMIN_HEADERS)

        self.assertEqual(response.status_code, 502)

    def test_links_require_post(self) -> None:
        order = make_order()
        response = self.client.get(f'/api/admin/gerar-links-mp/{order.id}', **ADMIN_HEADERS)
        self.assertEqual(response.status_code, 405)


@override_settings(ADMIN_PASSWORD=ADMIN_PASSWORD, SITE_DOMAIN='cabanadebrincar.com.br', FEEDBACK_MAX_FOTOS=2)
class FeedbackFlowTests(TempMediaMixin, ApiTestCase):
    def _issue_token(self, order):
        response = self.client.post(f'/api/admin/gerar-token/{order.id}', **ADMIN_HEADERS)
        self.assertEqual(response.status_code, 200)
        return response.json()

    def _photo(self, name='foto.gif'):
        return SimpleUploadedFile(name, GIF_BYTES, content_type='image/gif')

    def test_token_submission_and_moderation(self) -> None:
        order = make_order()
        issued = self._issue_token(order)
        token = issued['token']
        self.assertEqual(issued['url'], f'https://cabanadebrincar.com.br/feedback.html?t={token}')

        self.assertEqual(self.client.get(f'/api/feedback/{token}').json(), {'nome': 'Maria Souza'})

        response = self.client.post(
            f'/api/feedback/{token}',
            data={'texto': 'Festa perfeita!', 'nota': '5', 'fotos': [self._photo('a.gif'), self._photo('b.gif')]},
        )

        self.assertEqual(response.status_code, 201)
        depoimento = Depoimento.objects.get(id=response.json()['id'])
        self.assertFalse(depoimento.aprovado)
        self.assertEqual(depoimento.nota, 5)
        self.assertEqual(depoimento.fotos.count(), 2)
        self.assertEqual(self.client.get('/api/depoimentos').json(), [])

        response = self.put_json(f'/api/admin/depoimentos/{depoimento.id}', {'aprovado': True}, **ADMIN_HEADERS)
        self.assertEqual(response.status_code, 200)
        public = self.client.get('/api/depoimentos').json()
        self.assertEqual(len(public), 1)
        self.assertEqual(len(public[0]['fotos']), 2)

    def test_token_is_single_use(self) -> None:
        order = make_order()
        token = self._issue_token(order)['token']

        first = self.client.post(f'/api/feedback/{token}', data={'texto': 'Primeiro'})
        second = self.client.post(f'/api/feedback/{token}', data={'texto': 'Segundo'})

        self.assertEqual(first.status_code, 201)
        self.assertEqual(second.status_code, 404)
        self.assertEqual(self.client.get(f'/api/feedback/{token}').status_code, 404)
        self.assertEqual(Depoimento.objects.count(), 1)
        order.refresh_from_db()
        self.assertIsNone(order.token_avaliacao)

    def test_reissued_token_replaces_previous(self) -> None:
        order = make_order()
        old = self._issue_token(order)['token']
        new = self._issue_token(order)['token']

        self.assertNotEqual(old, new)
        self.assertEqual(self.client.get(f'/api/feedback/{old}').status_code, 404)
        self.assertEqual(self.client.get(f'/api/feedback/{new}').status_code, 200)

    def test_validation_errors_keep_token(self) -> None:
        order = make_order()
        token = self._issue_token(order)['token']

        cases = [
            {'texto': '   '},
            {'texto': 'Ok', 'nota': '9'},
            {'texto': 'Ok', 'nota': 'dez'},
            {'texto': 'Ok', 'fotos': [self._photo('1.gif'), self._photo('2.gif'), self._photo('3.gif')]},
        ]
        for data in cases:
            response = self.client.post(f'/api/feedback/{token}', data=data)
            self.assertEqual(response.status_code, 400, data)

        self.assertFalse(Depoimento.objects.exists())
        order.refresh_from_db()
        self.assertEqual(order.token_avaliacao, token)

    def test_non_image_photo_is_rejected(self) -> None:
        order = make_order()
        token = self._issue_token(order)['token']
        disfarcado = SimpleUploadedFile('foto.jpg', b'#!/bin/sh\necho oi\n', content_type='image/jpeg')

        response = self.client.post(
            f'/api/feedback/{token}',
            data={'texto': 'Festa linda', 'fotos': [self._photo(), disfarcado]},
        )

        self.assertEqual(response.status_code, 400)
        self.assertIn('foto.jpg', response.json()['error'])
        self.assertFalse(Depoimento.objects.exists())
        order.refresh_from_db()
        self.assertEqual(order.token_avaliacao, token)

    def test_testimonial_survives_order_deletion(self) -> None:
        order = make_order()
        token = self._issue_token(order)['token']
        self.client.post(f'/api/feedback/{token}', data={'texto': 'Amamos'})

        self.client.delete(f'/api/admin/pedidos/{order.id}', **ADMIN_HEADERS)

        depoimento = Depoimento.objects.get()
        self.assertIsNone(depoimento.orcamento_id)
        self.assertEqual(depoimento.nome_cliente, 'Maria Souza')

    def test_delete_testimonial(self) -> None:
        depoimento = Depoimento.objects.create(nome_cliente='Ana', texto='Legal')
        response = self.client.delete(f'/api/admin/depoimentos/{depoimento.id}', **ADMIN_HEADERS)
        self.assertEqual(response.status_code, 200)
        self.assertFalse(Depoimento.objects.exists())


class OrderDeletionTests(ApiTestCase):
    def test_cascades_payments_and_party_costs_but_keeps_ledger(self) -> None:
        order = make_order()
        PagamentoOrcamento.objects.create(orcamento=order, valor=Decimal('500'), tipo='SINAL')
        CustoFesta.objects.create(orcamento=order, descricao='Gas', valor=Decimal('40'))
        CustoGeral.objects.create(descricao='Sinal', valor=Decimal('500'), tipo='receita', orcamento=order)

        response = self.client.delete(f'/api/admin/pedidos/{order.id}', **ADMIN_HEADERS)

        self.assertEqual(response.status_code, 200)
        self.assertFalse(Orcamento.objects.exists())
        self.assertFalse(PagamentoOrcamento.objects.exists())
        self.assertFalse(CustoFesta.objects.exists())
        self.assertIsNone(CustoGeral.objects.get().orcamento_id)

    def test_releases_package_held_by_paid_order(self) -> None:
        pacote = make_pacote(status=PacotePegueMonte.STATUS_RESERVADO)
        order = make_order(
            pacote_pegue_monte=pacote,
            status_pagamento=Orcamento.PAGAMENTO_PAGO,
            status_agenda=Orcamento.AGENDA_AGENDADO,
        )

        self.client.delete(f'/api/admin/pedidos/{order.id}', **ADMIN_HEADERS)

        pacote.refresh_from_db()
        self.assertEqual(pacote.status, PacotePegueMonte.STATUS_LIBERADO)

    def test_unpaid_order_does_not_release_someone_elses_reservation(self) -> None:
        pacote = make_pacote(status=PacotePegueMonte.STATUS_RESERVADO)
        order = make_order(pacote_pegue_monte=pacote)

        self.client.delete(f'/api/admin/pedidos/{order.id}', **ADMIN_HEADERS)

        pacote.refresh_from_db()
        self.assertEqual(pacote.status, PacotePegueMonte.STATUS_RESERVADO)


class PriceAdminTests(ApiTestCase):
    def test_create_update_delete(self) -> None:
        response = self.post_json(
            '/api/admin/precos',
            {'descricao': 'Tenda gigante', 'categoria': 'tendas', 'valor': '180'},
            **ADMIN_HEADERS,
        )
        self.assertEqual(response.status_code, 201)
        preco = response.json()['preco']
        self.assertTrue(preco['item_chave'].startswith('custom_'))

        response = self.put_json(
            f'/api/admin/precos/{preco["id"]}',
            {'valor': '199.90', 'disponivel': False},
            **ADMIN_HEADERS,
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['preco']['valor'], '199.90')
        self.assertFalse(response.json()['preco']['disponivel'])

        response = self.client.delete(f'/api/admin/precos/{preco["id"]}', **ADMIN_HEADERS)
        self.assertEqual(response.status_code, 200)
        self.assertFalse(TabelaPreco.objects.exists())

    def test_update_rejects_unknown_and_invalid_fields(self) -> None:
        preco = TabelaPreco.objects.create(item_chave='luzes', descricao='Luzes', valor=Decimal('25'), categoria='x')

        for payload in ({'item_chave': 'outra'}, {'valor': '-1'}, {'valor': 'NaN'}, {'disponivel': 'talvez'}):
            response = self.put_json(f'/api/admin/precos/{preco.id}', payload, **ADMIN_HEADERS)
            self.assertEqual(response.status_code, 400, payload)

        preco.refresh_from_db()
        self.assertEqual(preco.item_chave, 'luzes')
        self.assertEqual(preco.valor, Decimal('25.00'))


class LedgerTests(TempMediaMixin, ApiTestCase):
    def test_summary_combines_ledger_and_party_costs(self) -> None:
        order = make_order()
        CustoGeral.objects.create(descricao='Sinal', valor=Decimal('500'), tipo='receita')
        CustoGeral.objects.create(descricao='Integral', valor=Decimal('950'), tipo='receita')
        CustoGeral.objects.create(descricao='Lavanderia', valor=Decimal('120'), tipo='despesa')
        CustoFesta.objects.create(orcamento=order, descricao='Gas', valor=Decimal('30'))

        response = self.client.get('/api/admin/financeiro/resumo', **ADMIN_HEADERS)

        self.assertEqual(
            response.json(),
            {'receitas': '1450.00', 'despesas': '120.00', 'custos_festas': '30.00', 'saldo': '1300.00'},
        )

    def test_pdf_report(self) -> None:
        make_order(status_agenda=Orcamento.AGENDA_AGENDADO)
        CustoGeral.objects.create(descricao='Sinal & reserva <festa>', valor=Decimal('500'), tipo='receita')

        response = self.client.get('/api/admin/financeiro/relatorio', **ADMIN_HEADERS)

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response['Content-Type'], 'application/pdf')
        self.assertTrue(response.content.startswith(b'%PDF'))

    def test_manual_expense_with_receipt(self) -> None:
        response = self.client.post(
            '/api/admin/custos',
            data={
                'descricao': 'Tecido novo',
                'valor': '89,90',
                'categoria': 'material',
                'comprovante': SimpleUploadedFile('nota.pdf', b'%PDF-1.4', content_type='application/pdf'),
            },
            **ADMIN_HEADERS,
        )

        self.assertEqual(response.status_code, 201)
        custo = response.json()['custo']
        self.assertEqual(custo['tipo'], 'despesa')
        self.assertEqual(custo['valor'], '89.90')
        self.assertTrue(custo['comprovante_url'])

        response = self.client.get('/api/admin/custos?tipo=receita', **ADMIN_HEADERS)
        self.assertEqual(response.json(), [])

    def test_invalid_entries_are_rejected(self) -> None:
        for payload in (
            {'descricao': 'X', 'valor': '0'},
            {'descricao': '', 'valor': '10'},
            {'descricao': 'X', 'valor': '10', 'tipo': 'transferencia'},
            {'descricao': 'X', 'valor': 'dez'},
        ):
            response = self.post_json('/api/admin/custos', payload, **ADMIN_HEADERS)
            self.assertEqual(response.status_code, 400, payload)
        self.assertFalse(CustoGeral.objects.exists())

    def test_party_costs(self) -> None:
        order = make_order()

        response = self.post_json(
            f'/api/admin/pedidos/{order.id}/custos',
            {'descricao': 'Frete', 'valor': '45.5'},
            **ADMIN_HEADERS,
        )
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()['total'], '45.50')

        custo_id = response.json()['custos'][0]['id']
        self.client.delete(f'/api/admin/custos-festa/{custo_id}', **ADMIN_HEADERS)
        response = self.client.get(f'/api/admin/pedidos/{order.id}/custos', **ADMIN_HEADERS)
        self.assertEqual(response.json(), {'custos': [], 'total': '0.00'})


class PacoteAdminTests(TempMediaMixin, ApiTestCase):
    def test_create_with_photo_and_update(self) -> None:
        response = self.client.post(
            '/api/admin/pacotes',
            data={
                'nome': 'Pegue e Monte Fundo do Mar',
                'valor': '260',
                'foto': SimpleUploadedFile('mar.gif', GIF_BYTES, content_type='image/gif'),
            },
            **ADMIN_HEADERS,
        )
        self.assertEqual(response.status_code, 201)
        pacote = response.json()['pacote']
        self.assertEqual(pacote['status'], 'liberado')
        self.assertIn('pacotes/', pacote['foto_url'])

        response = self.put_json(f'/api/admin/pacotes/{pacote["id"]}', {'valor': '0'}, **ADMIN_HEADERS)
        self.assertEqual(response.status_code, 400)

        response = self.put_json(f'/api/admin/pacotes/{pacote["id"]}', {'status': 'reservado'}, **ADMIN_HEADERS)
        self.assertEqual(response.status_code, 400)

        response = self.put_json(f'/api/admin/pacotes/{pacote["id"]}', {'descricao': 'Novo'}, **ADMIN_HEADERS)
        self.assertEqual(response.json()['pacote']['descricao'], 'Novo')

    def test_create_rejects_non_image_photo(self) -> None:
        response = self.client.post(
            '/api/admin/pacotes',
            data={
                'nome': 'Pegue e Monte Fundo do Mar',
                'valor': '260',
                'foto': SimpleUploadedFile('mar.png', b'<html></html>', content_type='image/png'),
            },
            **ADMIN_HEADERS,
        )

        self.assertEqual(response.status_code, 400)
        self.assertFalse(PacotePegueMonte.objects.exists())


class CardapioAdminTests(ApiTestCase):
    def test_composition_upsert_and_removal(self) -> None:
        cardapio_id = self.post_json(
            '/api/admin/cardapios',
            {'nome': 'Cafe da manha', 'valor_por_pessoa': '25'},
            **ADMIN_HEADERS,
        ).json()['cardapio']['id']
        item_id = self.post_json(
            '/api/admin/itens-alimentacao',
            {'nome': 'Pao de queijo', 'custo_unitario': '0.80'},
            **ADMIN_HEADERS,
        ).json()['item']['id']
        url = f'/api/admin/cardapios/{cardapio_id}/composicao'

        self.post_json(url, {'item_id': item_id, 'quantidade_por_pessoa': '3'}, **ADMIN_HEADERS)
        response = self.post_json(url, {'item_id': item_id, 'quantidade_por_pessoa': '4'}, **ADMIN_HEADERS)
        self.assertEqual(response.json()['cardapio']['itens'][0]['quantidade_por_pessoa'], '4.00')
        self.assertEqual(len(response.json()['cardapio']['itens']), 1)

        response = self.post_json(url, {'item_id': item_id, 'quantidade_por_pessoa': '0'}, **ADMIN_HEADERS)
        self.assertEqual(response.json()['cardapio']['itens'], [])

        response = self.post_json(url, {'item_id': 99999}, **ADMIN_HEADERS)
        self.assertEqual(response.status_code, 404)

        for payload in ({'item_id': 'abc'}, {'item_id': -3}, {'item_id': [1]}):
            response = self.post_json(url, payload, **ADMIN_HEADERS)
            self.assertEqual(response.status_code, 400, payload)
            self.assertIn('error', response.json())


class RequestLogTests(ApiTestCase):
    def test_api_requests_are_logged_with_masked_payload(self) -> None:
        with self.assertLogs('cabana.requests', level='INFO') as logs:
            self.post_json('/api/orcamento', {'nome': 'Ana', 'whatsapp': '169', 'senha': 'segredo'})

        self.assertEqual(len(logs.records), 1)
        message = logs.records[0].getMessage()
        self.assertIn('POST /api/orcamento -> 201', message)
        self.assertIn('"senha": "***"', message)
        self.assertNotIn('segredo', message)

    def test_client_errors_are_warnings(self) -> None:
        with self.assertLogs('cabana.requests', level='INFO') as logs:
            self.client.get('/api/admin/pedidos')

        self.assertEqual(logs.records[0].levelname, 'WARNING')

    def test_feedback_token_is_hidden_in_log(self) -> None:
        order = make_order(token_avaliacao='token-secreto-123')

        with self.assertLogs('cabana.requests', level='INFO') as logs:
            response = self.client.get('/api/feedback/token-secreto-123')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {'nome': order.nome})
        message = logs.records[0].getMessage()
        self.assertIn('GET /api/feedback/***', message)
        self.assertNotIn('token-secreto-123', message)

    def test_mask_path(self) -> None:
        self.assertEqual(mask_path('/api/feedback/abc123'), '/api/feedback/***')
        self.assertEqual(mask_path('/api/admin/pedidos/7'), '/api/admin/pedidos/7')

    def test_mask_sensitive_nested(self) -> None:
        data = {'cliente': {'Token': 'abc', 'nome': 'Ana'}, 'itens': [{'password': 'x'}]}
        self.assertEqual(
            mask_sensitive(data),
            {'cliente': {'Token': '***', 'nome': 'Ana'}, 'itens': [{'password': '***'}]},
        )


class SeedPrecosCommandTests(TestCase):
    def test_seed_is_idempotent(self) -> None:
        call_command('seed_precos', stdout=StringIO())
        call_command('seed_precos', stdout=StringIO())

        self.assertEqual(TabelaPreco.objects.count(), 10)
        self.assertEqual(PacotePegueMonte.objects.count(), 2)
        self.assertTrue(TabelaPreco.objects.filter(item_chave='taxa_entrega', categoria='taxas').exists())
