from __future__ import annotations

import pytest

from pledgesync import main as main_module
from pledgesync.config import MissingConfigurationError, PatreonConfig
from pledgesync.domain.errors import UpstreamFetchError
from pledgesync.domain.reconciler import PullResult


def test_pull_reports_result(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setenv("PATREON_ACCESS_TOKEN", "token")
    monkeypatch.setenv("PATREON_CAMPAIGN_ID", "c1")
    captured: dict[str, object] = {}

    def fake_sync(**kwargs: object) -> PullResult:
        captured.update(kwargs)
        return PullResult(pages=2, patrons=7, uris=("a", "b"))

    monkeypatch.setattr(main_module, "sync_patreon_pledges", fake_sync)

    main_module.main(["pull", "--page-size", "50"])

    config = captured["config"]
    assert isinstance(config, PatreonConfig)
    assert config.page_size == 50
    assert config.campaign_id == "c1"
    assert capsys.readouterr().out == "Pulled 2 page(s), 7 patron(s)\n"


def test_pull_without_credentials_exits_with_configuration_error(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.delenv("PATREON_ACCESS_TOKEN", raising=False)
    monkeypatch.delenv("PATREON_CAMPAIGN_ID", raising=False)

    with pytest.raises(SystemExit) as excinfo:
        main_module.main(["pull"])

    assert excinfo.value.code == 2
    assert "PATREON_ACCESS_TOKEN" in capsys.readouterr().err


def test_pull_rejects_non_positive_page_size(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PATREON_ACCESS_TOKEN", "token")
    monkeypatch.setenv("PATREON_CAMPAIGN_ID", "c1")

    with pytest.raises(SystemExit) as excinfo:
        main_module.main(["pull", "--page-size", "0"])

    assert excinfo.value.code == 2


def test_pull_failure_exits_with_error(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setenv("PATREON_ACCESS_TOKEN", "token")
    monkeypatch.setenv("PATREON_CAMPAIGN_ID", "c1")

    def failing_sync(**_: object) -> PullResult:
        raise UpstreamFetchError("https://www.patreon.com/page")

    monkeypatch.setattr(main_module, "sync_patreon_pledges", failing_sync)

    with pytest.raises(SystemExit) as excinfo:
        main_module.main(["pull"])

    assert excinfo.value.code == 1
    assert "Broken response for page https://www.patreon.com/page" in capsys.readouterr().err


@pytest.mark.parametrize(
    ("result", "expected"),
    [
        ((True, None), "u1: expired (no tracked expiration)\n"),
        ((True, "2024-01-01T00:00:00Z"), "u1: expired since 2024-01-01T00:00:00Z\n"),
        ((False, "2024-02-01T00:00:00Z"), "u1: active until 2024-02-01T00:00:00Z\n"),
    ],
)
def test_expired_reports_state(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
    result: tuple[bool, str | None],
    expected: str,
) -> None:
    monkeypatch.setattr(main_module, "is_access_expired", lambda _user_id: result)

    main_module.main(["expired", "u1"])

    assert capsys.readouterr().out == expected


def test_missing_command_is_a_usage_error() -> None:
    with pytest.raises(SystemExit) as excinfo:
        main_module.main([])

    assert excinfo.value.code == 2


def test_configuration_errors_share_exit_code(monkeypatch: pytest.MonkeyPatch) -> None:
    def unconfigured(_user_id: str) -> tuple[bool, str | None]:
        raise MissingConfigurationError(["DATABASE_URI"])

    monkeypatch.setattr(main_module, "is_access_expired", unconfigured)

    with pytest.raises(SystemExit) as excinfo:
        main_module.main(["expired", "u1"])

    assert excinfo.value.code == 2


def test_link_ties_patron_to_user(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    linked: list[tuple[str, str]] = []
    monkeypatch.setattr(
        main_module, "link_patron", lambda patron_id, user_id: linked.append((patron_id, user_id))
    )

    main_module.main(["link", "p1", "u1"])

    assert linked == [("p1", "u1")]
    assert capsys.readouterr().out == "Linked patron p1 to user u1\n"
