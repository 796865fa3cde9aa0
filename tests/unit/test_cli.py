"""Tests for the command line interface."""
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import typer
from typer.testing import CliRunner

from chunkupload import ErrorKind, NegotiationError, QuotaInfo, UploadResult
from chunkupload.cli.main import _build_config, _parse_cookies, app

runner = CliRunner()


def _mock_client(**methods):
    """UploadClient stand-in usable as an async context manager."""
    client = MagicMock()
    client.__aenter__ = AsyncMock(return_value=client)
    client.__aexit__ = AsyncMock(return_value=False)
    for name, value in methods.items():
        setattr(client, name, value)
    return client


class TestParseCookies:
    def test_empty(self):
        assert _parse_cookies(None) == {}
        assert _parse_cookies("") == {}

    def test_pairs(self):
        assert _parse_cookies("sid=abc; csrftoken=x=y") == {'sid': 'abc', 'csrftoken': 'x=y'}

    def test_invalid(self):
        with pytest.raises(typer.BadParameter):
            _parse_cookies("justaname")


class TestBuildConfig:
    def test_options_applied(self):
        config = _build_config("https://files.example.com/", "sid=1", insecure=True, retries=3)

        assert config.base_url == "https://files.example.com/"
        assert config.cookies == {'sid': '1'}
        assert config.ssl.verify is False
        assert config.retry.max_retries == 3


class TestUploadCommand:
    """Test suite for `chunkupload upload`."""

    def test_upload_success(self, tmp_path):
        path = tmp_path / "video.mp4"
        path.write_bytes(b"x" * 100)
        result = UploadResult(
            upload_id="up-42", file_name="video.mp4", file_size=100, checksum="deadbeef", chunks_sent=1
        )
        client = _mock_client(upload=AsyncMock(return_value=result))

        with patch("chunkupload.UploadClient", return_value=client) as client_cls:
            outcome = runner.invoke(app, ["upload", str(path), "--url", "http://server/", "--cookie", "sid=1"])

        assert outcome.exit_code == 0, outcome.output
        assert "up-42" in outcome.output
        assert "deadbeef" in outcome.output
        config = client_cls.call_args.kwargs['config']
        assert config.base_url == "http://server/"
        assert config.cookies == {'sid': '1'}

    def test_upload_failure_exits_1(self, tmp_path):
        path = tmp_path / "big.iso"
        path.write_bytes(b"x")
        error = NegotiationError("Storage quota exhausted", kind=ErrorKind.QUOTA_EXCEEDED, status=402)
        client = _mock_client(upload=AsyncMock(side_effect=error))

        with patch("chunkupload.UploadClient", return_value=client):
            outcome = runner.invoke(app, ["upload", str(path)])

        assert outcome.exit_code == 1
        assert "Storage quota exhausted" in outcome.output

    def test_upload_empty_file_exits_1(self, tmp_path):
        path = tmp_path / "empty.txt"
        path.write_bytes(b"")
        client = _mock_client(upload=AsyncMock(side_effect=ValueError("Cannot upload empty file")))

        with patch("chunkupload.UploadClient", return_value=client):
            outcome = runner.invoke(app, ["upload", str(path)])

        assert outcome.exit_code == 1
        assert "empty" in outcome.output

    def test_upload_missing_file(self):
        outcome = runner.invoke(app, ["upload", "/nonexistent/file.bin"])
        assert outcome.exit_code != 0

    def test_url_from_environment(self, tmp_path):
        path = tmp_path / "a.txt"
        path.write_bytes(b"a")
        result = UploadResult(upload_id="u", file_name="a.txt", file_size=1, checksum="e8b7be43", chunks_sent=1)
        client = _mock_client(upload=AsyncMock(return_value=result))

        with patch("chunkupload.UploadClient", return_value=client) as client_cls:
            outcome = runner.invoke(
                app, ["upload", str(path)],
                env={"CHUNKUPLOAD_URL": "http://env-server/", "CHUNKUPLOAD_COOKIE": "sid=env"}
            )

        assert outcome.exit_code == 0, outcome.output
        config = client_cls.call_args.kwargs['config']
        assert config.base_url == "http://env-server/"
        assert config.cookies == {'sid': 'env'}


class TestQuotaCommand:
    def test_quota_table(self):
        quota = QuotaInfo(used_quota=1024 ** 3, total_quota=4 * 1024 ** 3)
        client = _mock_client(get_quota=AsyncMock(return_value=quota))

        with patch("chunkupload.UploadClient", return_value=client):
            outcome = runner.invoke(app, ["quota"])

        assert outcome.exit_code == 0, outcome.output
        assert "1.00 GB" in outcome.output
        assert "25.0%" in outcome.output
