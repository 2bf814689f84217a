from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from repliers.cli import main
from repliers.constants import API_KEY_HEADER


def _mock_response(status: int, payload: object) -> MagicMock:
    response = MagicMock()
    response.status_code = status
    response.content = json.dumps(payload).encode("utf-8")
    response.headers = {}
    return response


@pytest.fixture
def session(monkeypatch: pytest.MonkeyPatch) -> MagicMock:
    session = MagicMock()
    session.headers = {}
    monkeypatch.setattr("repliers.transport.requests.Session", lambda: session)
    # setenv first so monkeypatch restores whatever a .env file loads
    for name in ("REPLIERS_API_KEY", "REPLIERS_BASE_URL", "REPLIERS_TIMEOUT", "REPLIERS_POOL_MAXSIZE"):
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    return session


def test_listing_command_writes_json_file(session: MagicMock, tmp_path: Path) -> None:
    session.request.return_value = _mock_response(
        200, {"mlsNumber": "RTC2788401", "listPrice": 750000, "photoCount": 12}
    )
    output = tmp_path / "out" / "listing.json"

    code = main(["--api-key", "cli-key", "--output", str(output), "listing", "RTC2788401"])

    assert code == 0
    assert json.loads(output.read_text(encoding="utf-8")) == {
        "photoCount": 12,
        "mlsNumber": "RTC2788401",
        "listPrice": 750000,
    }
    args, kwargs = session.request.call_args
    assert args == ("GET", "https://api.repliers.io/listings/RTC2788401")
    assert kwargs["headers"][API_KEY_HEADER] == "cli-key"


def test_search_command_prints_to_stdout(
    session: MagicMock, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setenv("REPLIERS_API_KEY", "env-key")
    session.request.return_value = _mock_response(200, {"count": 0, "listings": []})

    code = main(["search", "--city", "Toronto", "--status", "Active", "--min-price", "100000"])

    assert code == 0
    captured = capsys.readouterr()
    assert json.loads(captured.out) == {"count": 0, "listings": []}
    assert "[warn] No listings matched" in captured.err
    body = json.loads(session.request.call_args.kwargs["data"].decode("utf-8"))
    assert body == {"city": "Toronto", "status": ["Active"], "minPrice": 100000.0}


def test_invalid_dates_are_reported_without_request(
    session: MagicMock, capsys: pytest.CaptureFixture[str]
) -> None:
    code = main(["--api-key", "k", "deleted", "--min-date", "2025-01-01", "--max-date", "2024-12-31"])

    assert code == 1
    assert "[error] Invalid input" in capsys.readouterr().err
    session.request.assert_not_called()


def test_rejected_key_is_reported(session: MagicMock, capsys: pytest.CaptureFixture[str]) -> None:
    session.request.return_value = _mock_response(401, {"message": "Invalid API key"})

    code = main(["--api-key", "wrong", "similar", "N1", "--radius", "5"])

    assert code == 1
    assert "[error] Authentication failed" in capsys.readouterr().err


def test_missing_api_key_is_an_argument_error(session: MagicMock) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["listing", "RTC2788401"])

    assert excinfo.value.code == 2


def test_settings_come_from_env_file(session: MagicMock, tmp_path: Path) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text(
        "REPLIERS_API_KEY=file-key\nREPLIERS_BASE_URL=https://sandbox.example.com\nREPLIERS_TIMEOUT=4.5\n",
        encoding="utf-8",
    )
    session.request.return_value = _mock_response(200, {"mlsNumber": "RTC2788401"})

    code = main(["--env-file", str(env_file), "listing", "RTC2788401"])

    assert code == 0
    args, kwargs = session.request.call_args
    assert args == ("GET", "https://sandbox.example.com/listings/RTC2788401")
    assert kwargs["headers"][API_KEY_HEADER] == "file-key"
    assert kwargs["timeout"] == 4.5


def test_flags_override_env_file(session: MagicMock, tmp_path: Path) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text("REPLIERS_API_KEY=file-key\nREPLIERS_TIMEOUT=4.5\n", encoding="utf-8")
    session.request.return_value = _mock_response(200, {"mlsNumber": "RTC2788401"})

    code = main(["--env-file", str(env_file), "--api-key", "flag-key", "--timeout", "9", "listing", "RTC2788401"])

    assert code == 0
    kwargs = session.request.call_args.kwargs
    assert kwargs["headers"][API_KEY_HEADER] == "flag-key"
    assert kwargs["timeout"] == 9.0


def test_malformed_timeout_setting_is_an_argument_error(
    session: MagicMock, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setenv("REPLIERS_API_KEY", "env-key")
    monkeypatch.setenv("REPLIERS_TIMEOUT", "soon")

    with pytest.raises(SystemExit) as excinfo:
        main(["listing", "RTC2788401"])

    assert excinfo.value.code == 2
    assert "Invalid configuration" in capsys.readouterr().err
    session.request.assert_not_called()


@pytest.mark.parametrize(
    "status, payload",
    [
        (404, {"message": "Listing not found"}),
        (500, {"message": "boom"}),
        (200, {"unexpected": True}),
    ],
)
def test_other_failures_are_reported_as_request_failures(
    session: MagicMock, capsys: pytest.CaptureFixture[str], status: int, payload: object
) -> None:
    session.request.return_value = _mock_response(status, payload)

    code = main(["--api-key", "k", "listing", "RTC2788401"])

    assert code == 1
    assert "[error] Request failed" in capsys.readouterr().err
