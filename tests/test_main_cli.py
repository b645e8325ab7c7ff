from __future__ import annotations

import httpx

from main import _list_complaints, _parse_args, _resolve_complaint, _show_health


def _client(handler) -> httpx.Client:
    return httpx.Client(base_url="http://testserver", transport=httpx.MockTransport(handler))


def test_default_command_invokes_serve() -> None:
    args = _parse_args([])
    assert args.command == "serve"


def test_default_command_accepts_options_without_subcommand() -> None:
    args = _parse_args(["--host", "127.0.0.1", "--port", "8080"])
    assert args.command == "serve"
    assert args.host == "127.0.0.1"
    assert args.port == 8080
    assert args.config is None


def test_admin_subcommand_still_available() -> None:
    args = _parse_args(["admin", "--admin-secret", "s3cret"])
    assert args.command == "admin"
    assert args.admin_secret == "s3cret"
    assert args.service_url is None


def test_list_complaints_prints_table(capsys) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/getAllComplaintsForAdmin"
        return httpx.Response(
            200,
            json={
                "complaints": [
                    {
                        "id": "c1",
                        "title": "Late delivery",
                        "rating": 2,
                        "resolved": False,
                        "date": "2024-05-01T12:00:00Z",
                    }
                ]
            },
        )

    with _client(handler) as client:
        _list_complaints(client)

    output = capsys.readouterr().out
    assert "1 complaint(s) found" in output
    assert "Late delivery" in output
    assert "open" in output


def test_list_complaints_reports_rejected_secret(capsys) -> None:
    with _client(lambda request: httpx.Response(403, json={"detail": "Admin access required"})) as client:
        _list_complaints(client)

    assert "rejected the admin secret" in capsys.readouterr().out


def test_resolve_complaint_reports_missing_id(capsys) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/resolveComplaint"
        return httpx.Response(404, json={"detail": "complaint not found"})

    with _client(handler) as client:
        _resolve_complaint(client, "missing")

    assert "does not exist" in capsys.readouterr().out


def test_show_health_prints_counts(capsys) -> None:
    with _client(lambda request: httpx.Response(200, json={"status": "ok", "users": 2, "complaints": 3})) as client:
        _show_health(client)

    assert "2 user(s), 3 complaint(s)" in capsys.readouterr().out
