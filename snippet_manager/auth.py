"""Signed-in identity tracking for the remote store."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Dict, Tuple

from pydantic import BaseModel, ConfigDict, Field

from .errors import NotSignedInError

logger = logging.getLogger("snippet_manager")


class AuthProvider(str, Enum):
    GOOGLE = "google"
    GITHUB = "github"


PROVIDER_SCOPES: Dict[AuthProvider, Tuple[str, ...]] = {
    AuthProvider.GOOGLE: (),
    AuthProvider.GITHUB: ("repo:status", "repo", "gist"),
}


class Identity(BaseModel):
    """A user signed in through one of the OAuth providers."""

    uid: str = Field(..., min_length=1)
    display_name: str | None = None
    email: str | None = None
    provider: AuthProvider = AuthProvider.GOOGLE

    model_config = ConfigDict(frozen=True)

    @property
    def label(self) -> str:
        return self.display_name or self.email or self.uid


class AuthSession:
    """Holds the identity the current session acts as."""

    def __init__(self, identity: Identity | None = None) -> None:
        self._identity = identity

    @property
    def current(self) -> Identity | None:
        return self._identity

    @property
    def is_signed_in(self) -> bool:
        return self._identity is not None

    @property
    def uid(self) -> str | None:
        return self._identity.uid if self._identity else None

    def sign_in(self, identity: Identity) -> Identity:
        self._identity = identity
        logger.info("Signed in as %s via %s", identity.label, identity.provider.value)
        return identity

    def sign_out(self) -> None:
        if self._identity is not None:
            logger.info("Signed out %s", self._identity.label)
        self._identity = None

    def require(self) -> Identity:
        if self._identity is None:
            raise NotSignedInError()
        return self._identity


__all__ = ["AuthProvider", "AuthSession", "Identity", "PROVIDER_SCOPES"]
