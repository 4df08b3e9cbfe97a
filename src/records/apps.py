from django.apps import AppConfig


class RecordsConfig(AppConfig):
    """Configuration for the records app."""

    name = "records"
