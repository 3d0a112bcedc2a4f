"""Tests for CLI interface.

Test Coverage:
    - Argument parsing
    - Command routing
    - Fetch command against a mocked endpoint
    - Caller-side NotFound retry
    - Show / clear of the cached record
"""

import json
from pathlib import Path

import httpx
import pytest

from asa_attribution.cli import create_parser, main
from asa_attribution.errors import NotFound
from asa_attribution.payload import AttributionPayload

ENDPOINT = "https://api-adservices.apple.com/api/v1/"


def make_payload() -> AttributionPayload:
    """Helper to create a payload for testing."""
    return AttributionPayload(
        attribution=True,
        org_id=40669820,
        campaign_id=542370539,
        conversion_type="Download",
        ad_group_id=542317095,
        country_or_region="US",
        keyword_id=87675432,
    )


def write_cache(cache_dir: Path, payload: AttributionPayload) -> None:
    cache_dir.mkdir(parents=True, exist_ok=True)
    (cache_dir / "savedAttributionPayload.json").write_bytes(payload.encode())


class TestParserCreation:
    """Test CLI parser creation."""

    def test_parser_prog_name(self):
        parser = create_parser()
        assert parser.prog == "asa-attribution"

    def test_fetch_requires_token(self):
        """fetch needs exactly one of --token / --token-file."""
        parser = create_parser()
        with pytest.raises(SystemExit):
            parser.parse_args(["fetch"])
        with pytest.raises(SystemExit):
            parser.parse_args(["fetch", "--token", "a", "--token-file", "b"])

    def test_fetch_defaults(self):
        parser = create_parser()
        args = parser.parse_args(["fetch", "--token", "abc"])

        assert args.command == "fetch"
        assert args.token == "abc"
        assert args.retries == 0
        assert args.format == "text"
        assert args.cache_dir == Path("data")

    def test_retries_bounded(self):
        """Retries cannot exceed the recommended attempt budget."""
        parser = create_parser()
        assert parser.parse_args(["fetch", "--token", "a", "--retries", "2"]).retries == 2
        with pytest.raises(SystemExit):
            parser.parse_args(["fetch", "--token", "a", "--retries", "3"])


class TestFetchCommand:
    """Test fetch against a mocked attribution endpoint."""

    def test_fetch_prints_payload(self, respx_mock, tmp_path, capsys):
        respx_mock.post(ENDPOINT).mock(
            return_value=httpx.Response(200, content=make_payload().encode())
        )

        code = main(["fetch", "--token", "tok", "--cache-dir", str(tmp_path)])

        assert code == 0
        out = capsys.readouterr().out
        assert "ASAOrgId: 40669820" in out
        assert "ASAKeywordID: 87675432" in out
        assert (tmp_path / "savedAttributionPayload.json").exists()

    def test_fetch_json_format(self, respx_mock, tmp_path, capsys):
        respx_mock.post(ENDPOINT).mock(
            return_value=httpx.Response(200, content=make_payload().encode())
        )

        code = main(["fetch", "--token", "tok", "--cache-dir", str(tmp_path), "--format", "json"])

        assert code == 0
        data = json.loads(capsys.readouterr().out)
        assert data["ASACampaignID"] == 542370539
        assert "ASAAdID" not in data

    def test_fetch_reads_token_file(self, respx_mock, tmp_path):
        route = respx_mock.post(ENDPOINT).mock(
            return_value=httpx.Response(200, json={"attribution": False})
        )
        token_file = tmp_path / "token.txt"
        token_file.write_text("file-token\n")

        code = main(["fetch", "--token-file", str(token_file), "--cache-dir", str(tmp_path)])

        assert code == 0
        assert route.calls.last.request.content == b"file-token"

    def test_fetch_no_attribution(self, respx_mock, tmp_path, capsys):
        respx_mock.post(ENDPOINT).mock(
            return_value=httpx.Response(200, json={"attribution": False})
        )

        code = main(["fetch", "--token", "tok", "--cache-dir", str(tmp_path)])

        assert code == 0
        assert "No attribution record" in capsys.readouterr().out

    def test_fetch_error_exit_code(self, respx_mock, tmp_path, capsys):
        respx_mock.post(ENDPOINT).mock(return_value=httpx.Response(400))

        code = main(["fetch", "--token", "tok", "--cache-dir", str(tmp_path)])

        assert code == 1
        assert "Token is invalid" in capsys.readouterr().err

    def test_fetch_empty_token(self, tmp_path, capsys):
        """A blank token never reaches the network."""
        code = main(["fetch", "--token", "   ", "--cache-dir", str(tmp_path)])

        assert code == 1
        assert "no token" in capsys.readouterr().err

    def test_missing_token_file(self, tmp_path, capsys):
        code = main(["fetch", "--token-file", str(tmp_path / "nope"), "--cache-dir", str(tmp_path)])
        assert code == 1


class TestRetry:
    """Caller-side retry after NotFound."""

    def test_retries_then_succeeds(self, respx_mock, tmp_path, monkeypatch):
        monkeypatch.setattr(NotFound, "retry_interval", 0.0)
        route = respx_mock.post(ENDPOINT)
        route.side_effect = [
            httpx.Response(404),
            httpx.Response(200, content=make_payload().encode()),
        ]

        code = main(["fetch", "--token", "tok", "--cache-dir", str(tmp_path), "--retries", "2"])

        assert code == 0
        assert route.call_count == 2

    def test_gives_up_after_retries(self, respx_mock, tmp_path, monkeypatch, capsys):
        monkeypatch.setattr(NotFound, "retry_interval", 0.0)
        route = respx_mock.post(ENDPOINT).mock(return_value=httpx.Response(404))

        code = main(["fetch", "--token", "tok", "--cache-dir", str(tmp_path), "--retries", "2"])

        assert code == 1
        assert route.call_count == 3
        assert "No record found" in capsys.readouterr().err

    def test_no_retry_for_other_errors(self, respx_mock, tmp_path, monkeypatch):
        monkeypatch.setattr(NotFound, "retry_interval", 0.0)
        route = respx_mock.post(ENDPOINT).mock(return_value=httpx.Response(500))

        code = main(["fetch", "--token", "tok", "--cache-dir", str(tmp_path), "--retries", "2"])

        assert code == 1
        assert route.call_count == 1


class TestCacheCommands:
    """Test show and clear."""

    def test_show_cached(self, tmp_path, capsys):
        write_cache(tmp_path, make_payload())

        code = main(["show", "--cache-dir", str(tmp_path), "--format", "json"])

        assert code == 0
        assert json.loads(capsys.readouterr().out)["ASAOrgId"] == 40669820

    def test_show_empty(self, tmp_path, capsys):
        code = main(["show", "--cache-dir", str(tmp_path)])

        assert code == 1
        assert "No cached attribution record" in capsys.readouterr().err

    def test_clear(self, tmp_path):
        write_cache(tmp_path, make_payload())

        assert main(["clear", "--cache-dir", str(tmp_path)]) == 0
        assert not (tmp_path / "savedAttributionPayload.json").exists()


class TestRouting:
    """Test command routing."""

    def test_version(self, capsys):
        assert main(["version"]) == 0
        assert "asa-attribution v0.1.0" in capsys.readouterr().out

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 0
        assert "usage" in capsys.readouterr().out.lower()
