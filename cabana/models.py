from decimal import Decimal

from django.db import models


class TabelaPreco(models.Model):
    CATEGORIA_PADRAO = 'padrao'
    CATEGORIA_ALIMENTACAO = 'alimentacao'
    CATEGORIA_TENDAS = 'tendas'
    CATEGORIA_ADICIONAIS = 'adicionais'
    CATEGORIAS_PUBLICAS = [CATEGORIA_PADRAO, CATEGORIA_ALIMENTACAO, CATEGORIA_TENDAS]

    item_chave = models.CharField(max_length=80, unique=True)
    descricao = models.CharField(max_length=160)
    valor = models.DecimalField(max_digits=10, decimal_places=2)
    categoria = models.CharField(max_length=40)
    disponivel = models.BooleanField(default=True)

    class Meta:
        db_table = 'tabela_precos'
        ordering = ['categoria', 'descricao']

    def __str__(self) -> str:
        return f'{self.descricao} ({self.categoria})'


class ItemAlimentacao(models.Model):
    nome = models.CharField(max_length=120)
    unidade = models.CharField(max_length=20, default='un')
    custo_unitario = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    ativo = models.BooleanField(default=True)

    class Meta:
        db_table = 'itens_alimentacao'
        ordering = ['nome']

    def __str__(self) -> str:
        return self.nome


class Cardapio(models.Model):
    nome = models.CharField(max_length=120)
    descricao = models.CharField(max_length=255, blank=True)
    valor_por_pessoa = models.DecimalField(max_digits=10, decimal_places=2)
    ativo = models.BooleanField(default=True)

    class Meta:
        db_table = 'cardapios'
        ordering = ['nome']

    def __str__(self) -> str:
        return self.nome


class CardapioComposicao(models.Model):
    cardapio = models.ForeignKey(Cardapio, on_delete=models.CASCADE, related_name='composicao')
    item = models.ForeignKey(ItemAlimentacao, on_delete=models.CASCADE, related_name='cardapios')
    quantidade_por_pessoa = models.DecimalField(max_digits=8, decimal_places=2, default=Decimal('1.00'))

    class Meta:
        db_table = 'cardapio_composicao'
        constraints = [
            models.UniqueConstraint(fields=['cardapio', 'item'], name='uniq_cardapio_item'),
        ]

    def __str__(self) -> str:
        return f'{self.cardapio.nome} - {self.item.nome}'


class PacotePegueMonte(models.Model):
    STATUS_LIBERADO = 'liberado'
    STATUS_RESERVADO = 'reservado'
    STATUS_CHOICES = [
        (STATUS_LIBERADO, 'Liberado'),
        (STATUS_RESERVADO, 'Reservado'),
    ]

    nome = models.CharField(max_length=120)
    descricao = models.CharField(max_length=255, blank=True)
    valor = models.DecimalField(max_digits=10, decimal_places=2)
    foto = models.ImageField(upload_to='pacotes/', blank=True, null=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_LIBERADO)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'pacotes_pegue_monte'
        ordering = ['nome']

    def __str__(self) -> str:
        return f'{self.nome} ({self.status})'


class Orcamento(models.Model):
    STATUS_PENDENTE = 'pendente'
    STATUS_APROVADO = 'aprovado'
    STATUS_CHOICES = [
        (STATUS_PENDENTE, 'Pendente'),
        (STATUS_APROVADO, 'Aprovado'),
    ]

    AGENDA_AGENDADO = 'agendado'
    AGENDA_CONCLUIDO = 'concluido'
    AGENDA_CHOICES = [
        (AGENDA_AGENDADO, 'Agendado'),
        (AGENDA_CONCLUIDO, 'Concluido'),
    ]

    PAGAMENTO_PENDENTE = 'pendente'
    PAGAMENTO_PARCIAL = 'parcial'
    PAGAMENTO_PAGO = 'pago'
    PAGAMENTO_CHOICES = [
        (PAGAMENTO_PENDENTE, 'Pendente'),
        (PAGAMENTO_PARCIAL, 'Parcial'),
        (PAGAMENTO_PAGO, 'Pago'),
    ]

    nome = models.CharField(max_length=120)
    whatsapp = models.CharField(max_length=25)
    email = models.EmailField(blank=True)
    endereco = models.CharField(max_length=255, blank=True)
    data_festa = models.DateField(blank=True, null=True)
    horario = models.CharField(max_length=20, blank=True)
    qtd_criancas = models.PositiveIntegerField(default=0)
    faixa_etaria = models.CharField(max_length=40, blank=True)
    modelo_barraca = models.CharField(max_length=80, blank=True)
    qtd_barracas = models.PositiveIntegerField(default=0)
    cores = models.CharField(max_length=120, blank=True)
    tema = models.CharField(max_length=255, blank=True)
    itens_padrao = models.JSONField(default=list, blank=True)
    itens_adicionais = models.JSONField(default=list, blank=True)
    alimentacao = models.JSONField(default=list, blank=True)
    alergias = models.TextField(blank=True)

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDENTE)
    status_agenda = models.CharField(max_length=20, choices=AGENDA_CHOICES, blank=True, null=True)
    status_pagamento = models.CharField(max_length=20, choices=PAGAMENTO_CHOICES, default=PAGAMENTO_PENDENTE)

    valor_final = models.DecimalField(max_digits=10, decimal_places=2, blank=True, null=True)
    valor_itens_extras = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    descricao_itens_extras = models.CharField(max_length=255, blank=True)
    custos = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))

    pacote_pegue_monte = models.ForeignKey(
        PacotePegueMonte,
        on_delete=models.SET_NULL,
        related_name='orcamentos',
        blank=True,
        null=True,
    )
    token_avaliacao = models.CharField(max_length=64, unique=True, blank=True, null=True)
    data_pedido = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'orcamentos'
        ordering = ['-data_pedido']

    def __str__(self) -> str:
        return f'Orcamento #{self.id} - {self.nome}'

    @property
    def total_a_pagar(self) -> Decimal:
        return (self.valor_final or Decimal('0.00')) + (self.valor_itens_extras or Decimal('0.00'))


class PagamentoOrcamento(models.Model):
    TIPO_SINAL = 'SINAL'
    TIPO_RESTANTE = 'RESTANTE'
    TIPO_INTEGRAL = 'INTEGRAL'
    TIPO_PEGUE_MONTE = 'PEGUE_MONTE'
    TIPO_CHOICES = [
        (TIPO_SINAL, 'Sinal (50%)'),
        (TIPO_RESTANTE, 'Restante (50%)'),
        (TIPO_INTEGRAL, 'Integral (5% off)'),
        (TIPO_PEGUE_MONTE, 'Pegue e Monte'),
    ]

    METODO_MERCADO_PAGO = 'mercadopago'

    orcamento = models.ForeignKey(Orcamento, on_delete=models.CASCADE, related_name='pagamentos')
    valor = models.DecimalField(max_digits=10, decimal_places=2)
    tipo = models.CharField(max_length=20, choices=TIPO_CHOICES)
    data_pagamento = models.DateTimeField(auto_now_add=True)
    metodo = models.CharField(max_length=30, default=METODO_MERCADO_PAGO)
    mp_payment_id = models.CharField(max_length=40, blank=True)
    notificado_em = models.DateTimeField(blank=True, null=True)
    notificacao_erro = models.CharField(max_length=255, blank=True)

    class Meta:
        db_table = 'pagamentos_orcamento'
        ordering = ['data_pagamento']
        constraints = [
            models.UniqueConstraint(fields=['orcamento', 'tipo'], name='uniq_pagamento_orcamento_tipo'),
        ]

    def __str__(self) -> str:
        return f'{self.tipo} R$ {self.valor} - orcamento #{self.orcamento_id}'


class CustoGeral(models.Model):
    TIPO_RECEITA = 'receita'
    TIPO_DESPESA = 'despesa'
    TIPO_CHOICES = [
        (TIPO_RECEITA, 'Receita'),
        (TIPO_DESPESA, 'Despesa'),
    ]

    descricao = models.CharField(max_length=160)
    valor = models.DecimalField(max_digits=10, decimal_places=2)
    tipo = models.CharField(max_length=10, choices=TIPO_CHOICES, default=TIPO_DESPESA)
    categoria = models.CharField(max_length=60, blank=True)
    data = models.DateTimeField(auto_now_add=True)
    orcamento = models.ForeignKey(
        Orcamento,
        on_delete=models.SET_NULL,
        related_name='lancamentos',
        blank=True,
        null=True,
    )
    comprovante = models.FileField(upload_to='comprovantes/', blank=True, null=True)

    class Meta:
        db_table = 'custos_gerais'
        ordering = ['-data']

    def __str__(self) -> str:
        return f'{self.tipo}: {self.descricao} - R$ {self.valor}'


class CustoFesta(models.Model):
    orcamento = models.ForeignKey(Orcamento, on_delete=models.CASCADE, related_name='custos_festa')
    descricao = models.CharField(max_length=160)
    valor = models.DecimalField(max_digits=10, decimal_places=2)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'custos_festa'
        ordering = ['created_at']

    def __str__(self) -> str:
        return f'{self.descricao} - R$ {self.valor}'


class Depoimento(models.Model):
    orcamento = models.ForeignKey(
        Orcamento,
        on_delete=models.SET_NULL,
        related_name='depoimentos',
        blank=True,
        null=True,
    )
    nome_cliente = models.CharField(max_length=120)
    texto = models.TextField()
    nota = models.PositiveSmallIntegerField(blank=True, null=True)
    aprovado = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'depoimentos'
        ordering = ['-created_at']

    def __str__(self) -> str:
        return f'Depoimento de {self.nome_cliente}'


class FotoDepoimento(models.Model):
    depoimento = models.ForeignKey(Depoimento, on_delete=models.CASCADE, related_name='fotos')
    imagem = models.ImageField(upload_to='depoimentos/')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'fotos_depoimento'
        ordering = ['id']

    def __str__(self) -> str:
        return self.imagem.name
