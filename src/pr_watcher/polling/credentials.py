"""
Credential resolution for the polling system.

Maps a repository owner to the token used to access its repositories.
"""

from collections.abc import Mapping


class CredentialResolver:
    """Resolves owner -> token using a per-owner table with a default fallback."""

    def __init__(self, tokens: Mapping[str, str], default_token: str = ""):
        self._tokens = dict(tokens)
        self._default_token = default_token

    def resolve(self, owner: str) -> str:
        """Return the owner's token, the default token, or an empty string."""
        return self._tokens.get(owner, self._default_token)

    def discovery_tokens(self) -> list[str]:
        """
        Distinct non-empty tokens to use for repository discovery.

        Per-owner tokens come first in table order; the default token is
        appended only when no owner already uses it.
        """
        tokens: list[str] = []
        for token in self._tokens.values():
            if token and token not in tokens:
                tokens.append(token)
        if self._default_token and self._default_token not in tokens:
            tokens.append(self._default_token)
        return tokens
