import time
from datetime import date

from django.core.management.base import BaseCommand, CommandError
from django.db import close_old_connections

from cabana.pegue_monte import release_expired_pickup_packages


class Command(BaseCommand):
    help = 'Libera pacotes Pegue e Monte de festas encerradas e conclui os pedidos.'

    def add_arguments(self, parser):
        parser.add_argument('--data', help='Data de referencia (AAAA-MM-DD); padrao: hoje.')
        parser.add_argument('--loop', action='store_true', help='Repete a varredura indefinidamente.')
        parser.add_argument('--intervalo-horas', type=float, default=12.0, help='Intervalo entre varreduras com --loop.')

    def handle(self, *args, **options):
        today = None
        if options['data']:
            try:
                today = date.fromisoformat(options['data'])
            except ValueError as exc:
                raise CommandError('Data invalida. Use AAAA-MM-DD.') from exc

        if options['intervalo_horas'] <= 0:
            raise CommandError('O intervalo precisa ser maior que zero.')

        while True:
            closed = release_expired_pickup_packages(today=today)
            self.stdout.write(self.style.SUCCESS(f'{len(closed)} pedido(s) Pegue e Monte concluido(s).'))
            if not options['loop']:
                return
            close_old_connections()
            time.sleep(options['intervalo_horas'] * 3600)
