from django.apps import AppConfig


class MarketplaceConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "marketplace"
    verbose_name = "Propella marketplace"

    def ready(self):
        from . import realtime
        from .services import profile

        realtime.connect_signals()
        profile.connect_signals()
