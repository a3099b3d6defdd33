"""Keygate services layer."""

from keygate.services.account import AccountService
from keygate.services.api_key import ApiKeyService
from keygate.services.cooldown import Cooldown, CooldownResult

__all__ = ["AccountService", "ApiKeyService", "Cooldown", "CooldownResult"]
