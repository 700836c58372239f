from django.apps import AppConfig


class CabanaConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'cabana'
    verbose_name = 'Cabana de Brincar'
