from django.apps import AppConfig


class SWMGConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "SWMG"

    def ready(self):
        # Import signals so receivers are registered
        from . import signals   # noqa: F401
