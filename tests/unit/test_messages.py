"""Tests for miniko.messages."""

from __future__ import annotations

from miniko.messages import MESSAGES, normalize_locale, translate


class TestTranslate:
    def test_formats_placeholders(self):
        assert translate("en", "condition", result="true") == "Condition: true"
        assert translate("es", "loop_iteration", index=2) == "Iteración del bucle 2"

    def test_unknown_key_returned_verbatim(self):
        assert translate("en", "no_such_key") == "no_such_key"

    def test_unsupported_locale_falls_back_to_english(self):
        assert normalize_locale("de") == "en"
        assert translate("de", "output") == "Output"

    def test_locales_share_keys(self):
        assert set(MESSAGES["en"]) == set(MESSAGES["es"])
