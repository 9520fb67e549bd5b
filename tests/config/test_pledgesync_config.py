from __future__ import annotations

from pathlib import Path
from urllib.parse import parse_qs, urlsplit

import pytest

from pledgesync.config import (
    ConfigurationError,
    MissingConfigurationError,
    ResilienceConfig,
    data_dir,
    get_database_config,
    get_patreon_config,
    require_env_vars,
)
from pledgesync.domain.errors import PledgeSyncError


def test_patreon_config_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PATREON_ACCESS_TOKEN", "  token  ")
    monkeypatch.setenv("PATREON_CAMPAIGN_ID", "1234")

    config = get_patreon_config()

    assert config.access_token == "token"
    assert config.campaign_id == "1234"
    assert config.page_size == 500
    assert config.resilience.ratelimit is not None
    assert config.resilience.headers["Accept"] == "application/vnd.api+json"


@pytest.mark.parametrize("blank", [None, "", "   "])
def test_patreon_config_requires_credentials(
    monkeypatch: pytest.MonkeyPatch, blank: str | None
) -> None:
    monkeypatch.setenv("PATREON_CAMPAIGN_ID", "1234")
    if blank is None:
        monkeypatch.delenv("PATREON_ACCESS_TOKEN", raising=False)
    else:
        monkeypatch.setenv("PATREON_ACCESS_TOKEN", blank)

    with pytest.raises(MissingConfigurationError, match="PATREON_ACCESS_TOKEN"):
        get_patreon_config()


def test_patreon_config_rejects_non_positive_page_size() -> None:
    with pytest.raises(ConfigurationError, match="page size"):
        get_patreon_config(page_size=0)


def test_members_url_requests_member_listing(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PATREON_ACCESS_TOKEN", "token")
    monkeypatch.setenv("PATREON_CAMPAIGN_ID", "1234")

    url = urlsplit(get_patreon_config(page_size=25).members_url())
    query = parse_qs(url.query)

    assert f"{url.scheme}://{url.netloc}{url.path}" == (
        "https://www.patreon.com/api/oauth2/v2/campaigns/1234/members"
    )
    assert query["include"] == ["user,currently_entitled_tiers"]
    assert query["page[count]"] == ["25"]
    assert "last_charge_status" in query["fields[member]"][0]
    assert query["fields[user]"] == ["email,full_name"]


def test_members_url_honours_custom_base_url(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PATREON_ACCESS_TOKEN", "token")
    monkeypatch.setenv("PATREON_CAMPAIGN_ID", "1234")

    config = get_patreon_config(
        resilience=ResilienceConfig(base_url="http://localhost:8080/v2")
    )

    assert config.members_url().startswith("http://localhost:8080/v2/campaigns/1234/members?")


def test_require_env_vars_reports_every_missing_name(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PLEDGESYNC_EXAMPLE", " value ")
    monkeypatch.delenv("PLEDGESYNC_MISSING_B", raising=False)
    monkeypatch.setenv("PLEDGESYNC_MISSING_A", "  ")

    assert require_env_vars(["PLEDGESYNC_EXAMPLE"]) == {"PLEDGESYNC_EXAMPLE": "value"}
    with pytest.raises(MissingConfigurationError) as excinfo:
        require_env_vars(["PLEDGESYNC_MISSING_B", "PLEDGESYNC_EXAMPLE", "PLEDGESYNC_MISSING_A"])

    assert excinfo.value.names == ("PLEDGESYNC_MISSING_A", "PLEDGESYNC_MISSING_B")
    assert str(excinfo.value) == (
        "Missing configuration for: PLEDGESYNC_MISSING_A, PLEDGESYNC_MISSING_B"
    )


def test_configuration_errors_are_pledgesync_errors() -> None:
    assert issubclass(MissingConfigurationError, ConfigurationError)
    assert issubclass(ConfigurationError, PledgeSyncError)


def test_database_defaults_to_file_in_data_dir(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.setenv("PLEDGESYNC_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.delenv("DATABASE_URI", raising=False)

    database = get_database_config()

    assert data_dir() == (tmp_path / "data").resolve()
    assert (tmp_path / "data").is_dir()
    assert database.uri == f"sqlite+pysqlite:///{(tmp_path / 'data' / 'pledgesync.db').resolve()}"


def test_data_dir_falls_back_to_xdg_data_home(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.delenv("PLEDGESYNC_DATA_DIR", raising=False)
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path))

    assert data_dir() == (tmp_path / "pledgesync").resolve()


def test_database_uri_override(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URI", "postgresql+psycopg://db/pledges")

    assert get_database_config().uri == "postgresql+psycopg://db/pledges"
