"""Token registry: symbol -> token identity.

Resolution is symbol-indexed. Two symbols may share a mint (the native
wrapped mint is listed as both ETH and SOL on Eclipse); each symbol still
resolves independently.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from enum import Enum

from solders.pubkey import Pubkey

from swap_router.constants import (
    NATIVE_MINT,
    TOKEN_2022_PROGRAM_ID,
    TOKEN_PROGRAM_ID,
    USDC_MINT,
    USDT_MINT,
    WBTC_MINT,
)
from swap_router.errors import UnknownTokenError


class TokenProgram(str, Enum):
    """Which token program owns a mint's accounts."""

    LEGACY = "legacy"
    EXTENDED = "extended"

    @property
    def program_id(self) -> Pubkey:
        """On-chain id of the token program."""
        if self is TokenProgram.EXTENDED:
            return TOKEN_2022_PROGRAM_ID
        return TOKEN_PROGRAM_ID


@dataclass(frozen=True)
class Token:
    """A fungible token known to the router."""

    symbol: str
    mint: Pubkey
    decimals: int
    program: TokenProgram = TokenProgram.LEGACY
    name: str = ""

    @property
    def is_native(self) -> bool:
        """True for the wrapped native mint."""
        return self.mint == NATIVE_MINT


class TokenRegistry:
    """Static mapping from token symbol to Token."""

    def __init__(self, tokens: Iterable[Token] | None = None) -> None:
        self._tokens: dict[str, Token] = {}
        if tokens:
            for token in tokens:
                self.register(token)

    def register(self, token: Token) -> None:
        """Add a token under its (upper-cased) symbol.

        Raises:
            ValueError: If the symbol is already registered or decimals are negative
        """
        key = token.symbol.upper()
        if key in self._tokens:
            raise ValueError(f"Duplicate token symbol: {key}")
        if token.decimals < 0:
            raise ValueError(f"Token {key} has negative decimals: {token.decimals}")
        self._tokens[key] = token

    def resolve(self, symbol: str) -> Token:
        """Look up a token by symbol (case-insensitive).

        Raises:
            UnknownTokenError: If the symbol is not registered
        """
        token = self._tokens.get(symbol.upper())
        if token is None:
            raise UnknownTokenError(symbol)
        return token

    def symbols(self) -> list[str]:
        return list(self._tokens)

    def tokens(self) -> list[Token]:
        return list(self._tokens.values())

    def symbol_for_mint(self, mint: Pubkey) -> str | None:
        """First registered symbol for a mint, or None."""
        for symbol, token in self._tokens.items():
            if token.mint == mint:
                return symbol
        return None

    def __contains__(self, symbol: object) -> bool:
        return isinstance(symbol, str) and symbol.upper() in self._tokens

    def __iter__(self) -> Iterator[Token]:
        return iter(self._tokens.values())

    def __len__(self) -> int:
        return len(self._tokens)


def default_token_registry() -> TokenRegistry:
    """Registry of the Eclipse mainnet tokens the router supports."""
    return TokenRegistry(
        [
            Token("ETH", NATIVE_MINT, 9, TokenProgram.LEGACY, "Ethereum (native)"),
            Token("SOL", NATIVE_MINT, 9, TokenProgram.LEGACY, "Solana"),
            Token("WETH", NATIVE_MINT, 9, TokenProgram.LEGACY, "Wrapped Ethereum"),
            Token("USDT", USDT_MINT, 6, TokenProgram.EXTENDED, "Tether USD"),
            Token("USDC", USDC_MINT, 6, TokenProgram.EXTENDED, "USD Coin"),
            Token("WBTC", WBTC_MINT, 8, TokenProgram.EXTENDED, "Wrapped Bitcoin"),
        ]
    )
