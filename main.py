#!/usr/bin/env python3
"""
Group By Year - Main Entry Point

Reads a list of Spotify tracks and organizes them by release year:

INPUT (tracks.txt):
    https://open.spotify.com/track/5kxddRG1RZaZROadk7iC4D
    https://open.spotify.com/track/72Bz4ciRZPBcVSw0nrZDHi
    https://open.spotify.com/track/3iVcZ5G6tvkXZkZKlMpIUs

OUTPUT:
    songs-2007.txt
        https://open.spotify.com/track/5kxddRG1RZaZROadk7iC4D
    songs-2015.txt
        https://open.spotify.com/track/72Bz4ciRZPBcVSw0nrZDHi
        https://open.spotify.com/track/3iVcZ5G6tvkXZkZKlMpIUs

Uses the Client Credentials flow, so it needs SPOTIFY_CLIENT_ID and
SPOTIFY_CLIENT_SECRET from a registered Spotify app.
"""

import argparse
import sys
from typing import List, Optional

import requests

from config import DEFAULT_CREDS_FILE, DEFAULT_OUTPUT_DIR, DEFAULT_TIMEOUT, Config, load_config
from errors import AuthError, ConfigError
from group_by_year import GroupingResult, group_tracks_by_year, load_tracks
from spotify_auth import request_token
from token_cache import CredentialCache
from track_lookup import fetch_release_date

PROG = "group-by-year"

USAGE = f"""
Usage: {PROG} filename [--creds-file PATH] [--output-dir DIR] [--timeout SECONDS]

filename\tfile containing list of spotify tracks in format https://open.spotify.com/track/:id
"""


# ----------------------------
# Output helpers
# ----------------------------

def print_separator(char="=", length=60):
    """Print a visual separator line."""
    print(char * length)


def print_title(text: str, char="=", length=60):
    print_separator(char, length)
    print(text)
    print_separator(char, length)


def print_usage(file=None) -> None:
    print(USAGE, file=file or sys.stdout)


def print_summary(result: GroupingResult) -> None:
    """Print tracks per year and anything that was skipped."""
    print()
    print_title("SUMMARY")
    for year in sorted(result.buckets):
        count = len(result.buckets[year])
        print(f"  songs-{year}.txt: {count} track(s)")
    print(f"✓ Grouped {result.total_grouped} track(s) into {len(result.buckets)} file(s)")

    if result.skipped:
        print()
        print_title(f"SKIPPED TRACKS ({len(result.skipped)})")
        for track, reason in result.skipped:
            print(f"  {track}: {reason}")
    print()


# ----------------------------
# Argument parsing
# ----------------------------

def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    # Help is handled by hand: the tool exits 1 after printing usage.
    parser = argparse.ArgumentParser(prog=PROG, add_help=False)
    parser.add_argument("filename", nargs="?")
    parser.add_argument("-h", "--help", action="store_true")
    parser.add_argument("--creds-file", default=str(DEFAULT_CREDS_FILE))
    parser.add_argument("--output-dir", default=str(DEFAULT_OUTPUT_DIR))
    parser.add_argument("--timeout", type=float, default=DEFAULT_TIMEOUT)
    return parser.parse_args(argv)


# ----------------------------
# Pipeline
# ----------------------------

def run(config: Config, session: Optional[requests.Session] = None) -> GroupingResult:
    """
    Authenticate, fetch release dates and write the per-year files.

    Output files are only touched once the input has been read and a token
    obtained, so config and auth failures leave previous output in place.

    Raises:
        ConfigError: If the input file is missing
        AuthError: If no access token could be obtained
    """
    owns_session = session is None
    session = session or requests.Session()

    try:
        print(f"Reading from {config.input_file}")
        tracks = load_tracks(config.input_file)

        cache = CredentialCache(
            config.creds_file,
            requester=lambda: request_token(
                config.client_id,
                config.client_secret,
                session=session,
                timeout=config.timeout,
            ),
        )
        access_token = cache.get_valid_token()

        def fetch(track_id: str) -> str:
            return fetch_release_date(track_id, access_token, session=session, timeout=config.timeout)

        return group_tracks_by_year(tracks, fetch, config.output_dir)
    finally:
        if owns_session:
            session.close()


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point. Returns the process exit code."""
    args = parse_args(argv)

    if args.help:
        print_usage()
        return 1

    if not args.filename:
        print("Please specify a filename")
        print_usage()
        return 1

    try:
        config = load_config(
            args.filename,
            creds_file=args.creds_file,
            output_dir=args.output_dir,
            timeout=args.timeout,
        )
        result = run(config)
    except (ConfigError, AuthError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\n\nOperation cancelled by user.")
        return 130

    print_summary(result)
    return 0


if __name__ == "__main__":
    sys.exit(main())
