"""Tests for SchemaDrift configuration, path lookup, batch runner and CLI."""

import json

import pytest
import yaml

from schemadrift import DriftRunner, EngineConfig, RiskLevel, load_config
from schemadrift.cli import main
from schemadrift.exceptions import ConfigError, DocumentLoadError
from schemadrift.jsonpath_utils import MISSING, JSONPathMatcher, _compile
from schemadrift.models import LogLevel
from schemadrift.utils import build_path, check_depth, load_document


class TestPaths:
    """Test path building and lookup."""

    def test_build_path(self):
        assert build_path("", "id") == "id"
        assert build_path("user", "id") == "user.id"
        assert build_path("", 0) == "[0]"
        assert build_path("items", 2) == "items[2]"
        assert build_path("items[2]", "zip") == "items[2].zip"

    def test_parse_path_segments(self):
        assert JSONPathMatcher.parse_path_segments("") == []
        assert JSONPathMatcher.parse_path_segments("user.addresses[0].zip") == [
            "user", "addresses", 0, "zip"
        ]
        assert JSONPathMatcher.parse_path_segments("[1][2]") == [1, 2]
        assert JSONPathMatcher.parse_path_segments("a[x]") == ["a[x]"]

    def test_find_value(self):
        doc = {"user": {"addresses": [{"zip": "12345"}], "nickname": None}}
        assert JSONPathMatcher.find_value(doc, "user.addresses[0].zip") == "12345"
        assert JSONPathMatcher.find_value(doc, "user.addresses") == [{"zip": "12345"}]
        assert JSONPathMatcher.find_value(doc, "") == doc
        assert JSONPathMatcher.find_value(doc, "user.nickname") is None
        assert JSONPathMatcher.exists(doc, "user.nickname")

    def test_find_missing_value(self):
        doc = {"items": [1]}
        assert JSONPathMatcher.find_value(doc, "items[3]") is MISSING
        assert JSONPathMatcher.find_value(doc, "other.key") is MISSING
        assert JSONPathMatcher.find_value(doc, "other", "fallback") == "fallback"
        assert not JSONPathMatcher.exists(doc, "items[1]")

    def test_star_key_is_not_a_wildcard(self):
        doc = {"*": 1, "a": 2}
        assert JSONPathMatcher.find_value(doc, "*") is MISSING
        assert JSONPathMatcher.find_value({"x": {"*": 1, "y": 2}}, "x.*", None) is None
        assert JSONPathMatcher.find_value({"items": [{"a": 1}]}, "items[0].a") == 1

    def test_compiled_paths_are_cached(self):
        assert JSONPathMatcher.compile("user.id") is JSONPathMatcher.compile("user.id")
        assert _compile.cache_info().maxsize == JSONPathMatcher.CACHE_SIZE

    def test_check_depth(self):
        assert check_depth(1, 10) == 0
        assert check_depth({}, 10) == 1
        assert check_depth({"a": [[{}]]}, 10) == 4


class TestConfig:
    """Test configuration file loading."""

    def test_full_config(self, tmp_path):
        path = tmp_path / "drift.yaml"
        path.write_text(yaml.safe_dump({
            "engine": {"max_depth": 20, "include_values": True, "log_level": "debug"},
            "scoring": {
                "weights": {"removed_field": 50, "added_field": 1},
                "decay": 80,
                "thresholds": {"low": 20, "medium": 60},
            },
        }))

        config = load_config(path)
        assert config.max_depth == 20
        assert config.include_values is True
        assert config.log_level == LogLevel.DEBUG
        assert config.max_payload_size_mb == 50
        assert config.scoring.removed_field == 50
        assert config.scoring.added_field == 1
        assert config.scoring.type_changed_structural == 35
        assert config.scoring.decay == 80
        assert config.scoring.low_threshold == 20
        assert config.scoring.medium_threshold == 60

    def test_json_config(self, tmp_path):
        path = tmp_path / "drift.json"
        path.write_text(json.dumps({"scoring": {"decay": 25}}))
        assert load_config(path).scoring.decay == 25

    def test_empty_config(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        config = load_config(path)
        assert config.max_depth == 100
        assert config.scoring.decay == 50

    def test_unknown_key(self, tmp_path):
        path = tmp_path / "drift.yaml"
        path.write_text("scoring:\n  weights:\n    moved_field: 10\n")
        with pytest.raises(ConfigError):
            load_config(path)

    def test_invalid_values(self, tmp_path):
        path = tmp_path / "drift.yaml"
        path.write_text("scoring:\n  decay: 0\n")
        with pytest.raises(ConfigError):
            load_config(path)

        path.write_text("engine:\n  log_level: LOUD\n")
        with pytest.raises(ConfigError):
            load_config(path)

        path.write_text("engine:\n  max_depth: -1\n")
        with pytest.raises(ConfigError):
            load_config(path)

        for thresholds in ("{low: high}", "{low: 10, medium: true}", "{low: 10.5}", "{low: 80, medium: 20}"):
            path.write_text(f"scoring:\n  thresholds: {thresholds}\n")
            with pytest.raises(ConfigError):
                load_config(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError):
            load_config(tmp_path / "nope.yaml")

    def test_unreadable_file(self, tmp_path):
        path = tmp_path / "drift.yaml"
        path.write_bytes(b"scoring:\n  decay: \xff\n")
        with pytest.raises(ConfigError):
            load_config(path)


class TestLoadDocument:
    """Test document loading."""

    def test_json_and_yaml(self, tmp_path):
        (tmp_path / "a.json").write_text('{"id": 1}')
        (tmp_path / "a.yaml").write_text("id: 1\ntags: [x]\n")
        assert load_document(tmp_path / "a.json") == {"id": 1}
        assert load_document(tmp_path / "a.yaml") == {"id": 1, "tags": ["x"]}

    def test_errors(self, tmp_path):
        (tmp_path / "bad.json").write_text('{"id": ')
        with pytest.raises(DocumentLoadError):
            load_document(tmp_path / "bad.json")
        with pytest.raises(DocumentLoadError):
            load_document(tmp_path / "missing.json")

    def test_unreadable_files(self, tmp_path):
        (tmp_path / "latin1.json").write_bytes(b'{"before": "\xff\xfe"}')
        with pytest.raises(DocumentLoadError) as exc_info:
            load_document(tmp_path / "latin1.json")
        assert "UTF-8" in exc_info.value.reason

        (tmp_path / "folder.yaml").mkdir()
        with pytest.raises(DocumentLoadError):
            load_document(tmp_path / "folder.yaml")


@pytest.fixture
def datasets(tmp_path):
    folder = tmp_path / "datasets"
    folder.mkdir()
    (folder / "01_same.json").write_text(json.dumps({
        "name": "unchanged",
        "before": {"id": 1, "tags": ["a"]},
        "after": {"id": 2, "tags": ["b"]},
    }))
    (folder / "02_removed.json").write_text(json.dumps({
        "before": {"id": 1, "flag": True},
        "after": {"id": 1},
    }))
    (folder / "03_many.yaml").write_text(yaml.safe_dump({
        "name": "many",
        "before": {"a": 1, "b": 2, "c": True},
        "after": {"a": 1, "d": 4},
    }))
    return folder


class TestRunner:
    """Test the batch runner."""

    def test_run_folder(self, datasets):
        report = DriftRunner().run_folder(datasets, print_report=False)

        assert report.total == 3
        assert report.passed == 1
        assert report.failed == 2
        assert report.errors == 0
        assert report.max_score == 82
        assert report.breakdown["no_changes"] == ["unchanged"]
        assert report.breakdown["with_changes"] == ["02_removed", "many"]
        assert report.breakdown["medium_risk"] == ["02_removed"]
        assert report.breakdown["high_risk"] == ["many"]
        assert report.breakdown["fields_added"] == ["many"]

        scenario = report.scenarios[1]
        assert scenario.score == 55
        assert scenario.risk_level == RiskLevel.MEDIUM
        assert scenario.changes == [{"kind": "REMOVED_FIELD", "path": "flag", "oldType": "boolean"}]

    def test_bad_datasets(self, datasets):
        (datasets / "04_broken.json").write_text("{not json")
        (datasets / "05_shape.json").write_text(json.dumps({"before": {}}))

        report = DriftRunner().run_folder(datasets, print_report=False)
        assert report.total == 5
        assert report.errors == 2
        assert report.passed == 1
        assert report.failed == 2
        assert report.breakdown["errors"] == ["04_broken", "05_shape"]
        assert report.scenarios[3].error["code"] == "DOCUMENT_LOAD_ERROR"
        assert report.scenarios[4].error["code"] == "DATASET_FORMAT_ERROR"

    def test_undecodable_dataset(self, datasets):
        (datasets / "04_latin1.json").write_bytes(b'{"before": "\xff\xfe", "after": {}}')

        report = DriftRunner().run_folder(datasets, print_report=False)
        assert report.total == 4
        assert report.errors == 1
        assert report.failed == 2
        assert report.breakdown["errors"] == ["04_latin1"]
        assert report.scenarios[3].error["code"] == "DOCUMENT_LOAD_ERROR"

    def test_engine_errors_are_reported(self, datasets):
        runner = DriftRunner(EngineConfig(max_depth=1))
        report = runner.run_folder(datasets, print_report=False)
        # only the first dataset nests deeper than one level
        assert report.errors == 1
        assert report.scenarios[0].to_dict()["error"]["code"] == "MAX_DEPTH_ERROR"
        assert report.passed == 0
        assert report.failed == 2

    def test_to_dict(self, datasets):
        data = DriftRunner().run_folder(datasets, print_report=False).to_dict()
        assert data["summary"]["total_datasets"] == 3
        assert data["summary"]["unchanged_rate"] == "33.3%"
        assert data["scenarios"][2]["risk_level"] == "HIGH"

    def test_print_summary(self, datasets, capsys):
        DriftRunner().run_folder(datasets, print_report=True)
        out = capsys.readouterr().out
        assert "UNCHANGED: unchanged" in out
        assert "CHANGED: many (score 82, High Risk)" in out
        assert "Drift Results: 1/3 unchanged" in out

    def test_missing_folder(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            DriftRunner().run_folder(tmp_path / "nope", print_report=False)


class TestCli:
    """Test the command line interface."""

    def _write(self, tmp_path, name, data):
        path = tmp_path / name
        path.write_text(json.dumps(data))
        return str(path)

    def test_compare(self, tmp_path, capsys):
        old = self._write(tmp_path, "old.json", {"id": 1, "flag": True})
        new = self._write(tmp_path, "new.json", {"id": 1})

        assert main(["compare", old, new]) == 1
        out = capsys.readouterr().out
        assert "flag" in out
        assert "Removed: boolean" in out
        assert "Migration Risk Score: 55/100 (Medium Risk)" in out

    def test_compare_no_changes(self, tmp_path):
        old = self._write(tmp_path, "old.json", {"id": 1})
        assert main(["compare", old, old, "-q"]) == 0

    def test_compare_report(self, tmp_path):
        old = self._write(tmp_path, "old.json", {"id": 1, "user": {"name": "a"}})
        new = self._write(tmp_path, "new.json", {"id": "1", "user": {}})
        report_path = tmp_path / "report.json"

        code = main([
            "compare", old, new, "-q", "--values",
            "--kind", "REMOVED_FIELD", "-r", str(report_path),
        ])
        assert code == 1

        data = json.loads(report_path.read_text())
        assert data["changes"] == [{
            "kind": "REMOVED_FIELD", "path": "user.name", "oldType": "string",
            "oldValue": "a", "newValue": None,
        }]
        # full report scored: 40 + 15 points
        assert data["score"] == 67
        assert data["summary"] == {"added": 0, "removed": 1, "risky": 0}

    def test_compare_missing_file(self, tmp_path, capsys):
        old = self._write(tmp_path, "old.json", {})
        assert main(["compare", old, str(tmp_path / "missing.json")]) == 2
        assert "Error:" in capsys.readouterr().err

    def test_batch(self, datasets, tmp_path):
        report_path = tmp_path / "report.json"
        code = main(["batch", str(datasets), "-q", "-r", str(report_path)])
        assert code == 1
        assert json.loads(report_path.read_text())["summary"]["changed"] == 2

    def test_batch_counts_errors_apart(self, datasets, tmp_path, capsys):
        (datasets / "04_broken.json").write_text("{not json")
        report_path = tmp_path / "report.json"

        code = main(["batch", str(datasets), "-r", str(report_path)])
        assert code == 2

        summary = json.loads(report_path.read_text())["summary"]
        assert summary["total_datasets"] == 4
        assert summary["changed"] == 2
        assert summary["errors"] == 1
        out = capsys.readouterr().out
        assert "Changed: 2" in out
        assert "Errors: 1" in out

    def test_compare_undecodable_file(self, tmp_path, capsys):
        old = self._write(tmp_path, "old.json", {})
        bad = tmp_path / "bad.json"
        bad.write_bytes(b"\xff\xfe{}")
        assert main(["compare", old, str(bad)]) == 2
        assert "Error:" in capsys.readouterr().err

    def test_compare_invalid_thresholds(self, tmp_path, capsys):
        old = self._write(tmp_path, "old.json", {"id": 1})
        config_path = tmp_path / "drift.yaml"
        config_path.write_text("scoring:\n  thresholds: {low: high}\n")
        assert main(["compare", old, old, "-c", str(config_path)]) == 2
        assert "Invalid config 'thresholds'" in capsys.readouterr().err

    def test_batch_with_config(self, datasets, tmp_path):
        config_path = tmp_path / "drift.yaml"
        config_path.write_text("scoring:\n  thresholds: {low: 90, medium: 95}\n")
        report_path = tmp_path / "report.json"

        main(["batch", str(datasets), "-q", "-c", str(config_path), "-r", str(report_path)])
        data = json.loads(report_path.read_text())
        assert data["breakdown"]["low_risk"] == ["unchanged", "02_removed", "many"]
