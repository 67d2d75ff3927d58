"""
Group Spotify tracks into per-year files.

Each run rebuilds songs-<YEAR>.txt in the output directory:
1. Delete any songs-*.txt left over from a previous run
2. Look up every track's release date and append "<date>\t<track>" to its year's file
3. Sort each file by release date and rewrite it with just the track references

Interrupting a run can leave bucket files unsorted or still carrying the date
column. Two runs sharing an output directory will clobber each other.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Tuple

from tqdm import tqdm

from errors import ConfigError, FetchError
from track_lookup import extract_track_id, release_year

BUCKET_GLOB = "songs-*.txt"


def bucket_path(output_dir: Path, year: str) -> Path:
    return Path(output_dir) / f"songs-{year}.txt"


@dataclass
class GroupingResult:
    buckets: Dict[str, List[str]] = field(default_factory=dict)  # year -> tracks in date order
    skipped: List[Tuple[str, str]] = field(default_factory=list)  # (track, reason)
    output_dir: Path = Path(".")

    @property
    def paths(self) -> List[Path]:
        return [bucket_path(self.output_dir, year) for year in sorted(self.buckets)]

    @property
    def total_grouped(self) -> int:
        return sum(len(tracks) for tracks in self.buckets.values())


def load_tracks(path: Path) -> List[str]:
    """
    Read the track listing: one reference per line, blank lines ignored.

    Raises:
        ConfigError: If the file doesn't exist or can't be read
    """
    path = Path(path)
    if not path.is_file():
        raise ConfigError(f"Input file not found: {path}")
    try:
        text = path.read_text(encoding="utf-8-sig")
    except OSError as e:
        raise ConfigError(f"Could not read {path}: {e}") from e

    return [line.strip() for line in text.splitlines() if line.strip()]


def clear_year_buckets(output_dir: Path) -> List[Path]:
    """
    Delete songs-*.txt from a previous run. Returns the paths removed.

    Raises:
        ConfigError: If the output directory can't be created or cleaned
    """
    output_dir = Path(output_dir)
    removed = []
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
        for p in sorted(output_dir.glob(BUCKET_GLOB)):
            if p.is_file():
                p.unlink()
                removed.append(p)
    except OSError as e:
        raise ConfigError(f"Could not prepare output directory {output_dir}: {e}") from e
    return removed


def append_to_bucket(output_dir: Path, release_date: str, track: str) -> Path:
    """Append one "<release_date>\t<track>" record to the track's year file."""
    path = bucket_path(output_dir, release_year(release_date))
    try:
        with open(path, "a", encoding="utf-8") as f:
            f.write(f"{release_date}\t{track}\n")
    except OSError as e:
        raise ConfigError(f"Could not write {path}: {e}") from e
    return path


def finalize_buckets(paths: Iterable[Path]) -> Dict[Path, List[str]]:
    """
    Sort each bucket by release date and strip the date column.

    ISO dates ("YYYY", "YYYY-MM-DD") sort correctly as strings. The sort is
    stable, so tracks sharing a release date keep their fetch order.

    Returns:
        Mapping of bucket path -> track references as written

    Raises:
        ConfigError: If a bucket file can't be read or rewritten
    """
    finalized: Dict[Path, List[str]] = {}
    for path in paths:
        records = []
        try:
            with open(path, "r", encoding="utf-8") as f:
                for line in f:
                    line = line.rstrip("\n")
                    if not line:
                        continue
                    release_date, sep, track = line.partition("\t")
                    if not sep:
                        release_date, track = "", line
                    records.append((release_date, track))

            records.sort(key=lambda rec: rec[0])
            tracks = [track for _, track in records]

            with open(path, "w", encoding="utf-8") as f:
                f.writelines(f"{track}\n" for track in tracks)
        except OSError as e:
            raise ConfigError(f"Could not rewrite {path}: {e}") from e
        finalized[Path(path)] = tracks

    return finalized


def group_tracks_by_year(
    tracks: List[str],
    fetch: Callable[[str], str],
    output_dir: Path = Path("."),
    show_progress: bool = True,
) -> GroupingResult:
    """
    Fetch release dates for every track and write sorted per-year files.

    Args:
        tracks: Track references in input order (URLs or bare ids)
        fetch: Called with a bare track id, returns its release date.
            Raising FetchError skips that track.
        output_dir: Directory for songs-<YEAR>.txt
        show_progress: Show a tqdm progress bar

    Returns:
        GroupingResult with the tracks written per year and the tracks skipped
    """
    output_dir = Path(output_dir)
    result = GroupingResult(output_dir=output_dir)

    clear_year_buckets(output_dir)

    touched: Dict[str, Path] = {}
    for track in tqdm(tracks, desc="Fetching tracks", unit="track", disable=not show_progress):
        try:
            release_date = fetch(extract_track_id(track))
        except FetchError as e:
            tqdm.write(f"{track} -> skipped ({e})")
            result.skipped.append((track, str(e)))
            continue

        year = release_year(release_date)
        touched[year] = append_to_bucket(output_dir, release_date, track)
        tqdm.write(f"{track} -> {year}")

    finalized = finalize_buckets(touched.values())
    for year, path in touched.items():
        result.buckets[year] = finalized[path]

    return result
