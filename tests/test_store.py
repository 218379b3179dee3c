"""Tests for the JSON snapshot accessors."""

import json

from courier.store import load_registered_groups, load_tasks


class TestRegisteredGroups:
    def test_missing_file(self, tmp_path):
        assert load_registered_groups(str(tmp_path / "nope.json")) == {}

    def test_load(self, tmp_path):
        path = tmp_path / "groups.json"
        path.write_text(json.dumps({
            "tg:-1001": {"name": "Team", "folder": "team"},
            "tg:42": {"folder": "main"},
        }))
        groups = load_registered_groups(str(path))
        assert groups["tg:-1001"].name == "Team"
        assert groups["tg:-1001"].folder == "team"
        assert groups["tg:42"].name == "tg:42"

    def test_reread_on_every_call(self, tmp_path):
        path = tmp_path / "groups.json"
        path.write_text("{}")
        assert load_registered_groups(str(path)) == {}
        path.write_text(json.dumps({"tg:1": {"name": "New", "folder": "new"}}))
        assert "tg:1" in load_registered_groups(str(path))

    def test_malformed_json(self, tmp_path, caplog):
        path = tmp_path / "groups.json"
        path.write_text("{not json")
        assert load_registered_groups(str(path)) == {}
        assert "Could not read" in caplog.text

    def test_wrong_shape(self, tmp_path):
        path = tmp_path / "groups.json"
        path.write_text("[]")
        assert load_registered_groups(str(path)) == {}


class TestTasks:
    def test_load(self, tmp_path):
        path = tmp_path / "tasks.json"
        path.write_text(json.dumps([
            {"id": 1, "prompt": "digest", "schedule_type": "cron", "status": "active",
             "next_run": "2026-01-01T09:00:00Z"},
            {"id": 2, "prompt": "done", "schedule_type": "once", "status": "completed"},
            "garbage",
        ]))
        tasks = load_tasks(str(path))
        assert [t.id for t in tasks] == ["1", "2"]
        assert tasks[0].next_run == "2026-01-01T09:00:00Z"
        assert tasks[1].next_run is None

    def test_missing_file(self, tmp_path):
        assert load_tasks(str(tmp_path / "tasks.json")) == []

    def test_null_fields_default_to_empty(self, tmp_path):
        path = tmp_path / "tasks.json"
        path.write_text(json.dumps([
            {"id": 3, "prompt": None, "schedule_type": None, "status": None},
        ]))
        task = load_tasks(str(path))[0]
        assert task.prompt == ""
        assert task.schedule_type == ""
        assert task.status == ""
