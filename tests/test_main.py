"""
Unit tests for main.py

To run: pytest tests/test_main.py -v
"""

import json
import time
from pathlib import Path
from unittest.mock import patch

import pytest

from errors import AuthError
from main import main
from token_cache import Credential

RELEASE_DATES = {
    "5kxddRG1RZaZROadk7iC4D": "2007-03-01",
    "72Bz4ciRZPBcVSw0nrZDHi": "2015-05-01",
    "3iVcZ5G6tvkXZkZKlMpIUs": "2015-01-01",
}

INPUT = "\n".join(f"https://open.spotify.com/track/{track_id}" for track_id in RELEASE_DATES) + "\n"


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    """Run each test in its own directory with credentials set."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("SPOTIFY_CLIENT_ID", "my-id")
    monkeypatch.setenv("SPOTIFY_CLIENT_SECRET", "my-secret")
    (tmp_path / "tracks.txt").write_text(INPUT, encoding="utf-8")
    return tmp_path


def fake_fetch(track_id, access_token, session=None, timeout=20):
    return RELEASE_DATES[track_id]


class TestArguments:
    """Tests for argument handling and exit codes"""

    @pytest.mark.parametrize("flag", ["-h", "--help"])
    def test_help_exits_1(self, flag, capsys):
        """Test help prints usage and exits 1"""
        assert main([flag]) == 1
        assert "Usage:" in capsys.readouterr().out

    def test_missing_filename(self, capsys):
        """Test no filename prints a hint and usage"""
        assert main([]) == 1
        out = capsys.readouterr().out
        assert "Please specify a filename" in out
        assert "Usage:" in out

    @pytest.mark.parametrize("missing", ["SPOTIFY_CLIENT_ID", "SPOTIFY_CLIENT_SECRET"])
    def test_missing_env_leaves_outputs_alone(self, workdir, monkeypatch, missing, capsys):
        """Test a missing variable exits 1 without touching existing output"""
        monkeypatch.delenv(missing)
        old = workdir / "songs-1999.txt"
        old.write_text("keep me\n")

        with patch("main.request_token") as mock_token:
            assert main(["tracks.txt"]) == 1
            mock_token.assert_not_called()

        assert f"${missing}" in capsys.readouterr().err
        assert old.read_text() == "keep me\n"

    def test_missing_input_file(self, workdir, capsys):
        """Test a nonexistent listing exits 1"""
        assert main(["nope.txt"]) == 1
        assert "not found" in capsys.readouterr().err


class TestRun:
    """End-to-end runs with the Spotify calls mocked"""

    @patch("main.fetch_release_date", side_effect=fake_fetch)
    @patch("main.request_token", return_value=Credential("fresh", 4_000_000_000))
    def test_full_run(self, mock_token, mock_fetch, workdir):
        """Test the listing is grouped into sorted year files"""
        assert main(["tracks.txt"]) == 0

        assert (workdir / "songs-2007.txt").read_text() == "https://open.spotify.com/track/5kxddRG1RZaZROadk7iC4D\n"
        assert (workdir / "songs-2015.txt").read_text() == (
            "https://open.spotify.com/track/3iVcZ5G6tvkXZkZKlMpIUs\n"
            "https://open.spotify.com/track/72Bz4ciRZPBcVSw0nrZDHi\n"
        )
        mock_token.assert_called_once()
        assert mock_fetch.call_count == 3
        assert all(c.args[1] == "fresh" for c in mock_fetch.call_args_list)

        creds = json.loads((workdir / "spotify.creds").read_text())
        assert creds == {"access_token": "fresh", "expires_at": 4_000_000_000}

    @patch("main.fetch_release_date", side_effect=fake_fetch)
    @patch("main.request_token")
    def test_cached_token_is_reused(self, mock_token, mock_fetch, workdir):
        """Test a valid spotify.creds means no token request"""
        (workdir / "spotify.creds").write_text(
            json.dumps({"access_token": "cached", "expires_at": int(time.time()) + 600})
        )

        assert main(["tracks.txt"]) == 0

        mock_token.assert_not_called()
        assert all(c.args[1] == "cached" for c in mock_fetch.call_args_list)

    @patch("main.fetch_release_date")
    @patch("main.request_token", side_effect=AuthError("Token request failed: HTTP 400"))
    def test_auth_failure_exits_1(self, mock_token, mock_fetch, workdir, capsys):
        """Test an auth failure is fatal and leaves old output in place"""
        old = workdir / "songs-1999.txt"
        old.write_text("keep me\n")

        assert main(["tracks.txt"]) == 1

        mock_fetch.assert_not_called()
        assert "HTTP 400" in capsys.readouterr().err
        assert old.read_text() == "keep me\n"

    @patch("main.fetch_release_date")
    @patch("main.request_token", return_value=Credential("fresh", 4_000_000_000))
    def test_creds_file_is_a_directory(self, mock_token, mock_fetch, workdir, capsys):
        """Test an unwritable creds path exits 1 with an error line"""
        (workdir / "cachedir").mkdir()

        assert main(["tracks.txt", "--creds-file", "cachedir"]) == 1

        assert "Error: Could not write credentials" in capsys.readouterr().err
        mock_fetch.assert_not_called()
        assert not list(workdir.glob("songs-*.txt"))

    @patch("main.fetch_release_date", side_effect=fake_fetch)
    @patch("main.request_token", return_value=Credential("fresh", 4_000_000_000))
    def test_output_dir_is_a_file(self, mock_token, mock_fetch, workdir, capsys):
        """Test an unusable output directory exits 1 with an error line"""
        (workdir / "out").write_text("")

        assert main(["tracks.txt", "--output-dir", "out"]) == 1

        assert "Error: Could not prepare output directory" in capsys.readouterr().err

    @patch("main.request_token", return_value=Credential("fresh", 4_000_000_000))
    def test_custom_output_dir(self, mock_token, workdir):
        """Test --output-dir and --creds-file are honored"""
        with patch("main.fetch_release_date", side_effect=fake_fetch):
            assert main(["tracks.txt", "--output-dir", "out", "--creds-file", "cache/creds.json"]) == 0

        assert sorted(p.name for p in (workdir / "out").iterdir()) == ["songs-2007.txt", "songs-2015.txt"]
        assert (workdir / "cache" / "creds.json").exists()
        assert not list(Path(workdir).glob("songs-*.txt"))
