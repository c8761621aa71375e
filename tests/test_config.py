from __future__ import annotations

import pytest
from pydantic import ValidationError

from milo.config.app_config import AppConfig
from milo.config.email_config import EmailConfig
from milo.config.llm_config import LlmConfig


def test_recipients_parse_from_comma_separated_string() -> None:
    config = EmailConfig(digest_recipients="a@example.com, b@example.com,,")

    assert config.digest_recipients == ["a@example.com", "b@example.com"]


def test_recipients_parse_from_json_string() -> None:
    config = EmailConfig(digest_recipients='["a@example.com"]')

    assert config.digest_recipients == ["a@example.com"]


def test_recipients_come_from_environment(monkeypatch) -> None:
    monkeypatch.setenv("DIGEST_RECIPIENTS", "x@example.com,y@example.com")

    assert EmailConfig().digest_recipients == ["x@example.com", "y@example.com"]


def test_recipients_are_required() -> None:
    with pytest.raises(ValidationError):
        EmailConfig(digest_recipients="")


@pytest.mark.parametrize("value", ["8", "25:00", "08:60", "eight"])
def test_invalid_digest_time(value) -> None:
    with pytest.raises(ValidationError):
        EmailConfig(digest_time_utc=value)


def test_digest_time_is_normalised() -> None:
    config = EmailConfig(digest_time_utc="7:05")

    assert config.digest_time_utc == "07:05"
    assert config.digest_hour_minute == (7, 5)


def test_llm_temperature_bounds() -> None:
    with pytest.raises(ValidationError):
        LlmConfig(temperature=1.5)


def test_blank_cron_secret_is_treated_as_unset() -> None:
    assert AppConfig(cron_secret="  ").cron_secret is None


def test_app_env_is_validated() -> None:
    with pytest.raises(ValidationError):
        AppConfig(app_env="prod")
