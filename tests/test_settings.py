from unittest.mock import MagicMock

from asmr_catalog.core.http_client import create_http_client_from_settings
from asmr_catalog.core.settings import CatalogSettings, create_settings_from_config


def test_defaults():
    settings = CatalogSettings()
    assert settings.translation_language == "en"
    assert settings.site_mirror == "asmr-200"
    assert settings.request_timeout == 10
    assert settings.subtitle_param == 0


def test_unknown_language_falls_back_to_english():
    assert CatalogSettings(translation_language="klingon").translation_language == "en"
    assert CatalogSettings(translation_language="ja").translation_language == "ja"


def test_unknown_mirror_falls_back():
    assert CatalogSettings(site_mirror="asmr-999").site_mirror == "asmr-200"


def test_round_trip_through_dict():
    settings = CatalogSettings(only_show_sfw=True, show_tags=["ASMR"])
    assert CatalogSettings.from_dict(settings.to_dict()) == settings


def test_from_config_store_parses_strings():
    values = {
        "translation_language": "zh-CN",
        "only_show_subtitled": "true",
        "only_show_sfw": "false",
        "site_mirror": "asmr-100",
        "request_timeout": "15",
        "show_tags": "Binaural, Whisper",
    }
    store = MagicMock()
    store.get_config.side_effect = lambda key, default=None: values.get(key, default)

    settings = create_settings_from_config(store)

    assert settings.translation_language == "zh-CN"
    assert settings.only_show_subtitled is True
    assert settings.only_show_sfw is False
    assert settings.site_mirror == "asmr-100"
    assert settings.request_timeout == 15
    assert settings.show_tags == ["Binaural", "Whisper"]
    assert settings.subtitle_param == 1


def test_bad_timeout_uses_default():
    assert CatalogSettings.from_dict({"request_timeout": "soon"}).request_timeout == 10


def test_http_client_reads_timeout():
    client = create_http_client_from_settings(CatalogSettings(request_timeout=7))
    assert client.config.requests_timeout == (7, 7)
