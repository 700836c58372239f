from django.urls import path

from . import views

urlpatterns = [
    path('health', views.health, name='health'),
    path('api/fotos', views.fotos_galeria, name='fotos_galeria'),
    path('api/itens-disponiveis', views.itens_disponiveis, name='itens_disponiveis'),
    path('api/cardapios', views.cardapios_publicos, name='cardapios_publicos'),
    path('api/pacotes-pegue-monte', views.pacotes_disponiveis, name='pacotes_disponiveis'),
    path('api/depoimentos', views.depoimentos_publicos, name='depoimentos_publicos'),
    path('api/orcamento', views.orcamento_create, name='orcamento_create'),
    path('api/pegue-monte/<int:pacote_id>/checkout', views.pegue_monte_checkout, name='pegue_monte_checkout'),
    path('api/webhook', views.payments_webhook, name='payments_webhook'),
    path('api/feedback/<str:token>', views.feedback, name='feedback'),
    path('api/admin/pedidos', views.admin_pedidos, name='admin_pedidos'),
    path('api/admin/pedidos/<int:order_id>', views.admin_pedido, name='admin_pedido'),
    path('api/admin/pedidos/<int:order_id>/status', views.admin_pedido_status, name='admin_pedido_status'),
    path(
        'api/admin/pedidos/<int:order_id>/financeiro',
        views.admin_pedido_financeiro,
        name='admin_pedido_financeiro',
    ),
    path(
        'api/admin/pedidos/<int:order_id>/pagamentos',
        views.admin_pedido_pagamentos,
        name='admin_pedido_pagamentos',
    ),
    path('api/admin/pedidos/<int:order_id>/custos', views.admin_pedido_custos, name='admin_pedido_custos'),
    path('api/admin/custos-festa/<int:custo_id>', views.admin_custo_festa, name='admin_custo_festa'),
    path('api/admin/gerar-links-mp/<int:order_id>', views.admin_gerar_links, name='admin_gerar_links'),
    path('api/admin/gerar-token/<int:order_id>', views.admin_gerar_token, name='admin_gerar_token'),
    path('api/admin/precos', views.admin_precos, name='admin_precos'),
    path('api/admin/precos/<int:preco_id>', views.admin_preco, name='admin_preco'),
    path('api/admin/custos', views.admin_custos, name='admin_custos'),
    path('api/admin/custos/<int:custo_id>', views.admin_custo, name='admin_custo'),
    path('api/admin/financeiro/resumo', views.admin_financeiro_resumo, name='admin_financeiro_resumo'),
    path('api/admin/financeiro/relatorio', views.admin_financeiro_relatorio, name='admin_financeiro_relatorio'),
    path('api/admin/depoimentos', views.admin_depoimentos, name='admin_depoimentos'),
    path('api/admin/depoimentos/<int:depoimento_id>', views.admin_depoimento, name='admin_depoimento'),
    path('api/admin/pacotes', views.admin_pacotes, name='admin_pacotes'),
    path('api/admin/pacotes/<int:pacote_id>', views.admin_pacote, name='admin_pacote'),
    path('api/admin/liberar-pacotes', views.admin_liberar_pacotes, name='admin_liberar_pacotes'),
    path('api/admin/cardapios', views.admin_cardapios, name='admin_cardapios'),
    path('api/admin/cardapios/<int:cardapio_id>', views.admin_cardapio, name='admin_cardapio'),
    path(
        'api/admin/cardapios/<int:cardapio_id>/composicao',
        views.admin_cardapio_composicao,
        name='admin_cardapio_composicao',
    ),
    path('api/admin/itens-alimentacao', views.admin_itens_alimentacao, name='admin_itens_alimentacao'),
    path('api/admin/itens-alimentacao/<int:item_id>', views.admin_item_alimentacao, name='admin_item_alimentacao'),
]
