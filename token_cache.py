from __future__ import annotations

import json
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from errors import ConfigError


@dataclass(frozen=True)
class Credential:
    access_token: str
    expires_at: int  # absolute Unix timestamp

    def is_valid(self, now: float) -> bool:
        return self.expires_at > now

    def to_dict(self) -> dict:
        return {"access_token": self.access_token, "expires_at": self.expires_at}

    @classmethod
    def from_dict(cls, data: dict) -> "Credential":
        return cls(access_token=str(data["access_token"]), expires_at=int(data["expires_at"]))


class CredentialCache:
    """
    Single-record token store with expiry, backed by a small JSON file.

    The record is re-read on every call and overwritten on refresh. There is
    no locking: two runs sharing a creds file can overwrite each other.
    """

    def __init__(
        self,
        path: Path,
        requester: Callable[[], Credential],
        clock: Callable[[], float] = time.time,
    ):
        self.path = Path(path)
        self.requester = requester
        self.clock = clock

    def load(self) -> Optional[Credential]:
        """Return the stored credential, or None if there is nothing usable on disk."""
        if not self.path.exists():
            return None
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            return Credential.from_dict(data)
        except (OSError, ValueError, KeyError, TypeError):
            # Unreadable or garbled record counts as a miss
            return None

    def save(self, credential: Credential) -> None:
        """Overwrite the record. Raises ConfigError if the creds file can't be written."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(credential.to_dict(), indent=2), encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"Could not write credentials to {self.path}: {e}") from e

    def get_valid_token(self) -> str:
        """
        Return an access token that has not expired yet.

        Uses the cached record when it is still valid; otherwise asks the
        requester for a fresh credential and persists it before returning.

        Raises:
            AuthError: If a refresh was needed and the token request failed
            ConfigError: If the refreshed token could not be persisted
        """
        cached = self.load()
        if cached is not None and cached.is_valid(self.clock()):
            return cached.access_token

        fresh = self.requester()
        self.save(fresh)
        return fresh.access_token
