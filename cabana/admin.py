from django.contrib import admin

from .models import (
    Cardapio,
    CardapioComposicao,
    CustoGeral,
    Depoimento,
    FotoDepoimento,
    ItemAlimentacao,
    Orcamento,
    PacotePegueMonte,
    PagamentoOrcamento,
    TabelaPreco,
)


class PagamentoOrcamentoInline(admin.TabularInline):
    model = PagamentoOrcamento
    extra = 0
    readonly_fields = ('tipo', 'valor', 'metodo', 'mp_payment_id', 'data_pagamento', 'notificado_em', 'notificacao_erro')
    can_delete = False


@admin.register(Orcamento)
class OrcamentoAdmin(admin.ModelAdmin):
    list_display = ('id', 'nome', 'data_festa', 'status', 'status_agenda', 'status_pagamento', 'valor_final')
    list_filter = ('status', 'status_agenda', 'status_pagamento')
    search_fields = ('nome', 'whatsapp', 'email', 'tema')
    readonly_fields = ('data_pedido', 'token_avaliacao')
    inlines = [PagamentoOrcamentoInline]


@admin.register(TabelaPreco)
class TabelaPrecoAdmin(admin.ModelAdmin):
    list_display = ('descricao', 'categoria', 'valor', 'disponivel')
    list_filter = ('categoria', 'disponivel')
    search_fields = ('descricao', 'item_chave')


@admin.register(PacotePegueMonte)
class PacotePegueMonteAdmin(admin.ModelAdmin):
    list_display = ('nome', 'valor', 'status', 'created_at')
    list_filter = ('status',)


@admin.register(CustoGeral)
class CustoGeralAdmin(admin.ModelAdmin):
    list_display = ('descricao', 'tipo', 'categoria', 'valor', 'data')
    list_filter = ('tipo', 'categoria')


class FotoDepoimentoInline(admin.TabularInline):
    model = FotoDepoimento
    extra = 0


@admin.register(Depoimento)
class DepoimentoAdmin(admin.ModelAdmin):
    list_display = ('nome_cliente', 'nota', 'aprovado', 'created_at')
    list_filter = ('aprovado',)
    inlines = [FotoDepoimentoInline]


class CardapioComposicaoInline(admin.TabularInline):
    model = CardapioComposicao
    extra = 0


@admin.register(Cardapio)
class CardapioAdmin(admin.ModelAdmin):
    list_display = ('nome', 'valor_por_pessoa', 'ativo')
    inlines = [CardapioComposicaoInline]


admin.site.register(ItemAlimentacao)
