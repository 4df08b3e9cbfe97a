from django.apps import AppConfig


class InvitesConfig(AppConfig):
    """Configuration for the invites app."""

    name = "invites"
