"""Tests for translations module."""
import pytest

from isced_fields import translations
from isced_fields.errors import MissingLabelError
from isced_fields.harvest import TreeBuilder

SHARED_LABEL = {
    "07": (
        {"en": "Engineering", "fr": "Ingénierie et construction"},
        {
            "071": (
                {"en": "Engineering trades", "fr": "Commerce"},
                {"0711": {"en": "Engineering trades", "fr": "Ingénierie"}},
            ),
        },
    ),
}


class TestExtractTranslations:
    """Tests for extract_translations."""

    def test_english_maps_to_itself(self, engineering_fetcher, scheme_uri):
        taxonomy = TreeBuilder(engineering_fetcher).build(scheme_uri)
        result = translations.extract_translations(taxonomy)

        assert result["en"] == {
            "ISCED-F 2013": "ISCED-F 2013",
            "Engineering": "Engineering",
            "Engineering trades": "Engineering trades",
            "Chemical engineering": "Chemical engineering",
        }

    def test_visit_order(self, engineering_fetcher, scheme_uri):
        taxonomy = TreeBuilder(engineering_fetcher).build(scheme_uri)
        result = translations.extract_translations(taxonomy)

        assert list(result["fr"].items()) == [
            ("ISCED-F 2013", "CITE-F 2013"),
            ("Engineering", "Ingénierie, industries de transformation et construction"),
            ("Engineering trades", "Ingénierie et techniques apparentées"),
            ("Chemical engineering", "Génie chimique"),
        ]

    def test_shared_english_label_last_visit_wins(self, make_fetcher, scheme_uri):
        taxonomy = TreeBuilder(make_fetcher({"en": "ISCED-F 2013"}, SHARED_LABEL)).build(scheme_uri)
        result = translations.extract_translations(taxonomy)

        assert result["fr"]["Engineering trades"] == "Ingénierie"
        assert list(result["fr"]) == ["Engineering", "Engineering trades"]

    def test_language_missing_on_some_nodes(self, make_fetcher, scheme_uri):
        tree = {"01": ({"en": "Education", "de": "Bildung"}, {"011": ({"en": "Teacher training"}, {})})}
        taxonomy = TreeBuilder(make_fetcher({"en": "ISCED-F 2013"}, tree)).build(scheme_uri)
        result = translations.extract_translations(taxonomy)

        assert result["de"] == {"Education": "Bildung"}

    def test_repeatable(self, engineering_fetcher, scheme_uri):
        taxonomy = TreeBuilder(engineering_fetcher).build(scheme_uri)
        first = translations.to_messages(translations.extract_translations(taxonomy))
        second = translations.to_messages(translations.extract_translations(taxonomy))
        assert first == second
        assert [list(m) for m in first.values()] == [list(m) for m in second.values()]

    def test_missing_english_label(self, engineering_fetcher, scheme_uri):
        taxonomy = TreeBuilder(engineering_fetcher).build(scheme_uri)
        taxonomy.labels = {"fr": "CITE-F 2013"}

        with pytest.raises(MissingLabelError):
            translations.extract_translations(taxonomy)

    def test_count_translations(self, engineering_fetcher, scheme_uri):
        taxonomy = TreeBuilder(engineering_fetcher).build(scheme_uri)
        result = translations.extract_translations(taxonomy)
        assert translations.count_translations(result) == 8


class TestToMessages:
    """Tests for to_messages."""

    def test_message_list(self):
        messages = translations.to_messages({"fr": {"Engineering": "Ingénierie", "Arts": "Arts"}})
        assert messages == {
            "fr": [
                {"msgid": "Engineering", "msgstr": "Ingénierie"},
                {"msgid": "Arts", "msgstr": "Arts"},
            ]
        }


class TestReplicateLocales:
    """Tests for replicate_locales."""

    MESSAGES = {
        "en": [{"msgid": "Engineering", "msgstr": "Engineering"}],
        "pt": [{"msgid": "Engineering", "msgstr": "Engenharia"}],
        "pt_PT": [{"msgid": "Engineering", "msgstr": "stale"}],
    }

    def test_copies_source(self):
        result = translations.replicate_locales(self.MESSAGES, {"en": ["en_GB"]})
        assert result["en_GB"] == result["en"]
        assert result["en_GB"] is not result["en"]

    def test_overwrites_existing_target(self):
        result = translations.replicate_locales(self.MESSAGES, {"pt": ["pt_PT"]})
        assert result["pt_PT"] == [{"msgid": "Engineering", "msgstr": "Engenharia"}]

    def test_multiple_targets(self):
        result = translations.replicate_locales(self.MESSAGES, {"pt": ["pt_PT", "pt_BR"]})
        assert result["pt_BR"] == result["pt_PT"] == self.MESSAGES["pt"]

    def test_input_not_mutated(self):
        translations.replicate_locales(self.MESSAGES, {"en": ["en_GB"], "pt": ["pt_PT"]})
        assert "en_GB" not in self.MESSAGES
        assert self.MESSAGES["pt_PT"][0]["msgstr"] == "stale"

    def test_unknown_source_skipped(self, caplog):
        result = translations.replicate_locales(self.MESSAGES, {"no": ["nb"]})
        assert "nb" not in result
        assert "No messages for no" in caplog.text
