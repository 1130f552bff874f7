"""Token registry package."""

from .accounts import derive_token_account
from .registry import Token, TokenProgram, TokenRegistry, default_token_registry

__all__ = ["Token", "TokenProgram", "TokenRegistry", "default_token_registry", "derive_token_account"]
