from django.core.management.base import BaseCommand

from cabana.models import PacotePegueMonte, TabelaPreco


PRECOS = [
    {'item_chave': 'barraca_simples', 'descricao': 'Barraca simples', 'categoria': 'tendas', 'valor': '90.00'},
    {'item_chave': 'barraca_luxo', 'descricao': 'Barraca luxo com dossel', 'categoria': 'tendas', 'valor': '140.00'},
    {'item_chave': 'colchonete', 'descricao': 'Colchonete com lencol', 'categoria': 'padrao', 'valor': '0.00'},
    {'item_chave': 'almofadas', 'descricao': 'Kit de almofadas', 'categoria': 'padrao', 'valor': '0.00'},
    {'item_chave': 'bandeja', 'descricao': 'Bandeja de cafe da manha', 'categoria': 'padrao', 'valor': '0.00'},
    {'item_chave': 'luzes', 'descricao': 'Cordao de luzes', 'categoria': 'adicionais', 'valor': '25.00'},
    {'item_chave': 'paineis_baloes', 'descricao': 'Painel de baloes', 'categoria': 'adicionais', 'valor': '120.00'},
    {'item_chave': 'pizza', 'descricao': 'Pizza brotinho (por crianca)', 'categoria': 'alimentacao', 'valor': '18.00'},
    {'item_chave': 'cafe_manha', 'descricao': 'Cafe da manha (por crianca)', 'categoria': 'alimentacao', 'valor': '22.00'},
    {'item_chave': 'taxa_entrega', 'descricao': 'Taxa de entrega e montagem', 'categoria': 'taxas', 'valor': '60.00'},
]

PACOTES = [
    {'nome': 'Pegue e Monte Safari', 'descricao': '2 barracas, tapete e almofadas tematicas.', 'valor': '250.00'},
    {'nome': 'Pegue e Monte Princesas', 'descricao': '2 barracas, dossel e luzes.', 'valor': '270.00'},
]


class Command(BaseCommand):
    help = 'Popula a tabela de precos e os pacotes Pegue e Monte iniciais.'

    def handle(self, *args, **options):
        for data in PRECOS:
            TabelaPreco.objects.update_or_create(
                item_chave=data['item_chave'],
                defaults={**data, 'disponivel': True},
            )

        for data in PACOTES:
            PacotePegueMonte.objects.update_or_create(nome=data['nome'], defaults=data)

        self.stdout.write(
            self.style.SUCCESS(f'{len(PRECOS)} precos e {len(PACOTES)} pacotes Pegue e Monte cadastrados.')
        )
