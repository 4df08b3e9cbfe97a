from django.apps import AppConfig


class ApiConfig(AppConfig):
    """Configuration for the api app."""

    name = "api"
