from .admin import InviteAdminController
from .public import InviteController

__all__ = ["InviteAdminController", "InviteController"]
