from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Union

from errors import ConfigError


# ----------------------------
# Defaults (tweak as needed)
# ----------------------------

CLIENT_ID_VAR = "SPOTIFY_CLIENT_ID"
CLIENT_SECRET_VAR = "SPOTIFY_CLIENT_SECRET"

DEFAULT_CREDS_FILE = Path("spotify.creds")
DEFAULT_OUTPUT_DIR = Path(".")

# Seconds before an HTTP call to Spotify is abandoned
DEFAULT_TIMEOUT = 20.0


@dataclass(frozen=True)
class Config:
    client_id: str
    client_secret: str
    input_file: Path
    creds_file: Path = DEFAULT_CREDS_FILE
    output_dir: Path = DEFAULT_OUTPUT_DIR
    timeout: float = DEFAULT_TIMEOUT


def load_config(
    input_file: Union[str, Path],
    environ: Optional[Mapping[str, str]] = None,
    creds_file: Union[str, Path] = DEFAULT_CREDS_FILE,
    output_dir: Union[str, Path] = DEFAULT_OUTPUT_DIR,
    timeout: float = DEFAULT_TIMEOUT,
) -> Config:
    """
    Build the run configuration, reading client credentials from the environment.

    Args:
        input_file: File listing the tracks to organize
        environ: Mapping to read from (defaults to os.environ)
        creds_file: Where the access token is cached between runs
        output_dir: Directory that receives the songs-<YEAR>.txt files
        timeout: HTTP timeout in seconds

    Returns:
        Populated Config

    Raises:
        ConfigError: If a required variable is unset or empty, or timeout is not positive
    """
    if environ is None:
        environ = os.environ

    values = {}
    for name in (CLIENT_ID_VAR, CLIENT_SECRET_VAR):
        value = (environ.get(name) or "").strip()
        if not value:
            raise ConfigError(f"Please set ${name}")
        values[name] = value

    if timeout <= 0:
        raise ConfigError(f"Timeout must be positive, got {timeout}")

    return Config(
        client_id=values[CLIENT_ID_VAR],
        client_secret=values[CLIENT_SECRET_VAR],
        input_file=Path(input_file),
        creds_file=Path(creds_file),
        output_dir=Path(output_dir),
        timeout=timeout,
    )
