"""Tests for PadStore and the JSON model helpers."""

import json

import pytest

from padboard.exceptions import (
    ConfigFileInvalidError,
    ConfigValidationError,
    PersistenceReadError,
    PersistenceWriteError,
)
from padboard.models import AppConfig, Color, SavedPadRecord
from padboard.storage import PadStore
from padboard.utils.persistence import read_model, read_model_or_default, write_model


@pytest.mark.unit
class TestPadStore:

    def test_absent_file_is_empty(self, temp_dir):
        assert PadStore(temp_dir / "sounds.json").load() == []

    def test_empty_file_is_empty(self, temp_dir):
        path = temp_dir / "sounds.json"
        path.write_text("  \n", encoding="utf-8")
        assert PadStore(path).load() == []

    def test_malformed_file(self, temp_dir):
        path = temp_dir / "sounds.json"
        path.write_text('{"filePath": 3}', encoding="utf-8")

        with pytest.raises(PersistenceReadError) as exc_info:
            PadStore(path).load()

        assert exc_info.value.file_path == str(path)

    def test_writes_camel_case_array(self, temp_dir):
        store = PadStore.in_directory(temp_dir)
        store.save([
            SavedPadRecord(file_path="/clips/a.wav", color="#FF0000"),
            SavedPadRecord(file_path="/clips/b.mp3"),
        ])

        assert store.path.name == "sounds.json"
        assert json.loads(store.path.read_text(encoding="utf-8")) == [
            {"filePath": "/clips/a.wav", "color": "#FF0000"},
            {"filePath": "/clips/b.mp3", "color": None},
        ]

    def test_round_trip_keeps_order(self, temp_dir):
        store = PadStore(temp_dir / "sounds.json")
        records = [SavedPadRecord(file_path=f"/clips/{i}.wav", color=f"#0000{i:02X}") for i in range(5)]

        store.save(records)

        assert store.load() == records

    def test_missing_color_loads_white(self, temp_dir):
        path = temp_dir / "sounds.json"
        path.write_text('[{"filePath": "/a.wav"}, {"filePath": "/b.wav", "color": ""}]', encoding="utf-8")

        records = PadStore(path).load()

        assert [r.to_color() for r in records] == [Color.white(), Color.white()]

    def test_second_save_keeps_backup(self, temp_dir):
        store = PadStore(temp_dir / "sounds.json")
        store.save([SavedPadRecord(file_path="/first.wav")])
        store.save([SavedPadRecord(file_path="/second.wav")])

        backup = temp_dir / "sounds.json.bak"
        assert json.loads(backup.read_text(encoding="utf-8"))[0]["filePath"] == "/first.wav"
        assert not (temp_dir / "sounds.json.tmp").exists()

    def test_write_failure(self, temp_dir):
        # A directory where the file should be
        blocked = temp_dir / "sounds.json"
        blocked.mkdir()

        with pytest.raises(PersistenceWriteError):
            PadStore(blocked).save([SavedPadRecord(file_path="/a.wav")])


@pytest.mark.unit
class TestModelFiles:

    def test_missing_file_gives_default(self, temp_dir):
        config = read_model_or_default(temp_dir / "config.json", AppConfig)
        assert config.sample_rate == 44100

    def test_invalid_json(self, temp_dir):
        path = temp_dir / "config.json"
        path.write_text('{"sample_rate": 44100,}', encoding="utf-8")

        with pytest.raises(ConfigFileInvalidError):
            read_model(path, AppConfig)

    def test_invalid_value(self, temp_dir):
        path = temp_dir / "config.json"
        path.write_text('{"sample_rate": -1}', encoding="utf-8")

        with pytest.raises(ConfigValidationError) as exc_info:
            read_model(path, AppConfig)

        assert "sample_rate" in exc_info.value.user_message

    def test_save_creates_parents(self, temp_dir):
        path = temp_dir / "nested" / "dir" / "config.json"
        write_model(AppConfig(storage_dir=temp_dir), path)

        assert read_model(path, AppConfig).storage_dir == temp_dir
