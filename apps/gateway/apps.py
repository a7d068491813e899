from django.apps import AppConfig


class GatewayConfig(AppConfig):
    name = 'apps.gateway'
    label = 'gateway'
    verbose_name = 'Data gateway'

    def ready(self):
        from .gateway import gateway
        gateway.connect_signals()
