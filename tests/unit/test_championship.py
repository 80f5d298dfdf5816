"""Unit tests for regatta_stats.championship."""

import pytest

from regatta_stats.championship import (
    DEFAULT_CLASSIFIER,
    RegexChampionshipClassifier,
)


class TestRegexChampionshipClassifier:
    @pytest.mark.parametrize("name", [
        "Berliner Meisterschaft Opti",
        "DM 2024",
        "EM Zoom8",
        "WM ILCA 4",
        "Deutsche Jugendmeisterschaft",
        "Europameisterschaft",
        "Weltmeisterschaft",
        "JUGEND-MEISTERSCHAFT",
    ])
    def test_championship_names(self, name):
        assert DEFAULT_CLASSIFIER.is_championship(name) is True

    @pytest.mark.parametrize("name", [
        "Team Cup",
        "Sommerfest Regatta",
        "Kieler Woche",
        "Pokal der Havel",
        "Adam Memorial",
        # acronyms count only at the start of the name
        "IDM Laser",
        "Opti DM Travemünde",
        "Havel WM-Vorbereitung",
    ])
    def test_non_championship_names(self, name):
        assert DEFAULT_CLASSIFIER.is_championship(name) is False

    def test_empty_and_none(self):
        assert DEFAULT_CLASSIFIER.is_championship("") is False
        assert DEFAULT_CLASSIFIER.is_championship(None) is False

    def test_custom_pattern(self):
        clf = RegexChampionshipClassifier(r"\bcup\b")
        assert clf.is_championship("Havel Cup")
        assert not clf.is_championship("Berliner Meisterschaft")
