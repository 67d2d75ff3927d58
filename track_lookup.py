from __future__ import annotations

import re
from typing import Optional

import requests

from errors import FetchError
from json_fields import extract_field

TRACKS_URL = "https://api.spotify.com/v1/tracks"

# Any ".../track/<id>" link (open.spotify.com, intl-xx paths, play.spotify.com,
# no scheme) or a "spotify:track:<id>" URI
_TRACK_ID_RE = re.compile(r"(?:/track/|spotify:track:)([^/?#\s]+)")

_YEAR_RE = re.compile(r"^\d{4}")


def extract_track_id(track: str) -> str:
    """
    Turn a track reference into a bare Spotify track id.

    Takes the segment after the last "/track/" of a URL (any host or locale
    path, with or without a "?si=..." share suffix) or after "spotify:track:".
    Anything else is treated as a bare id.
    """
    ref = track.strip()
    matches = _TRACK_ID_RE.findall(ref)
    if matches:
        return matches[-1]
    ref = re.split(r"[?#]", ref, maxsplit=1)[0]
    return ref.rstrip("/")


def release_year(release_date: str) -> str:
    """Year bucket for a release date ("2015-05-01" -> "2015")."""
    return release_date[:4]


def fetch_release_date(
    track_id: str,
    access_token: str,
    session: Optional[requests.Session] = None,
    timeout: float = 20,
) -> str:
    """
    Look up a track's album release date.

    Args:
        track_id: Bare Spotify track id
        access_token: Bearer token from the credentials flow
        session: Optional requests session (module-level requests is used otherwise)
        timeout: Seconds to wait for the API

    Returns:
        Release date as Spotify reports it: "YYYY", "YYYY-MM" or "YYYY-MM-DD"

    Raises:
        FetchError: If the request fails, the track is not found, the token is
            rejected, or the response has no usable release_date
    """
    if not track_id:
        raise FetchError("Empty track id")

    url = f"{TRACKS_URL}/{track_id}"
    headers = {"Authorization": f"Bearer {access_token}"}

    http = session or requests
    try:
        r = http.get(url, headers=headers, timeout=timeout)
        r.raise_for_status()
    except requests.HTTPError as e:
        raise FetchError(f"Track {track_id}: HTTP {r.status_code}") from e
    except requests.RequestException as e:
        raise FetchError(f"Request for track {track_id} failed: {e}") from e

    release_date = extract_field(r.text, "release_date")
    if not release_date:
        raise FetchError(f"Track {track_id}: no release_date in response")
    if not _YEAR_RE.match(release_date):
        raise FetchError(f"Track {track_id}: unexpected release_date {release_date!r}")

    return release_date
