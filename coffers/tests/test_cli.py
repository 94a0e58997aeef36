"""
Tests for the command-line interface.
"""

import json

import pytest

from ..cli import main


class TestValidateCommand:
    """Tests for `coffers validate`."""

    def test_valid_file(self, tmp_path, capsys):
        path = tmp_path / "cards.json"
        path.write_text(json.dumps({
            "cards": [{"id": "copper", "name": "Copper", "card_type": "treasure", "treasure_grade": 1}],
        }), encoding="utf-8")

        assert main(["validate", str(path)]) == 0
        assert "OK" in capsys.readouterr().out

    def test_invalid_definitions(self, tmp_path, capsys):
        path = tmp_path / "cards.json"
        path.write_text(json.dumps({
            "cards": [{"id": "lump", "name": "Lump", "card_type": "treasure"}],
        }), encoding="utf-8")

        with pytest.raises(SystemExit):
            main(["validate", str(path)])
        assert "treasure_grade" in capsys.readouterr().out

    def test_malformed_document(self, tmp_path):
        path = tmp_path / "cards.json"
        path.write_text(json.dumps({"cards": [{"id": "x"}]}), encoding="utf-8")
        with pytest.raises(SystemExit):
            main(["validate", str(path)])

    def test_missing_file(self, tmp_path):
        with pytest.raises(SystemExit):
            main(["validate", str(tmp_path / "absent.json")])


class TestPlayCommand:
    """Tests for `coffers play`."""

    def test_play_card(self, capsys):
        assert main(["play", "mint", "--seed", "4"]) == 0
        out = capsys.readouterr().out
        assert "create_temp_treasure: ok" in out

    def test_selection_is_automatic(self, capsys):
        assert main(["play", "smelting", "--seed", "4"]) == 0
        assert "settle_card: ok" in capsys.readouterr().out

    def test_unknown_card(self):
        with pytest.raises(SystemExit):
            main(["play", "dragon"])

    def test_treasure_cannot_be_played(self):
        with pytest.raises(SystemExit):
            main(["play", "copper"])
