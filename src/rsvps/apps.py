from django.apps import AppConfig


class RsvpsConfig(AppConfig):
    """Configuration for the rsvps app."""

    name = "rsvps"
