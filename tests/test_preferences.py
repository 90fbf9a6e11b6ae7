import json

from icloud_auth.utils.preferences import Preferences


def test_missing_file_loads_empty(tmp_path):
    preferences = Preferences(tmp_path / "preferences.json")

    assert preferences.load() == {}
    assert preferences.get_default_remote() is None


def test_default_remote_round_trip_creates_parent_dirs(tmp_path):
    path = tmp_path / "config" / "rclone-icloud-auth" / "preferences.json"
    preferences = Preferences(path)

    preferences.set_default_remote("photos")

    assert Preferences(path).get_default_remote() == "photos"
    assert json.loads(path.read_text()) == {"default_remote": "photos"}


def test_set_default_keeps_other_keys(tmp_path):
    path = tmp_path / "preferences.json"
    path.write_text(json.dumps({"theme": "dark", "default_remote": "old"}))

    Preferences(path).set_default_remote("new")

    assert json.loads(path.read_text()) == {"theme": "dark", "default_remote": "new"}


def test_corrupt_file_loads_empty(tmp_path):
    path = tmp_path / "preferences.json"
    path.write_text("{not json")

    assert Preferences(path).load() == {}


def test_non_object_file_loads_empty(tmp_path):
    path = tmp_path / "preferences.json"
    path.write_text("[1, 2, 3]")

    assert Preferences(path).get_default_remote() is None
