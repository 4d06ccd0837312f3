"""Tests for policy documents and the policy store."""

import json
import os

import pytest

from proxy.policy import PackageConfig, PolicyError, PolicyStore


def _write(directory, name, content):
    path = os.path.join(str(directory), name)
    with open(path, "w", encoding="utf-8") as f:
        f.write(content)
    return path


class TestPackageConfig:
    """Tests for PackageConfig.from_dict."""

    def test_valid_document(self):
        """A well-formed document becomes a PackageConfig."""
        config = PackageConfig.from_dict({
            "release_denylist": ["foo-1.0.tar.gz", "foo-1.0.tar.gz"],
            "version_limits": ">=1.0,<2",
        })
        assert config.release_denylist == frozenset({"foo-1.0.tar.gz"})
        assert config.version_limits == ">=1.0,<2"

    @pytest.mark.parametrize("data", [
        {"release_denylist": []},
        {"version_limits": ">=1.0"},
        {"release_denylist": "foo-1.0.tar.gz", "version_limits": ""},
        {"release_denylist": [1, 2], "version_limits": ""},
        {"release_denylist": [], "version_limits": [">=1.0"]},
        ["not", "an", "object"],
    ])
    def test_invalid_documents(self, data):
        """Schema violations raise PolicyError."""
        with pytest.raises(PolicyError):
            PackageConfig.from_dict(data)


class TestPolicyStore:
    """Tests for PolicyStore.load."""

    def test_load_existing_policy(self, tmp_path):
        """A policy file keyed by package name is loaded."""
        _write(tmp_path, "foo.json", json.dumps({
            "release_denylist": ["foo-1.3.0-py3-none-any.whl"],
            "version_limits": ">=1.0",
        }))
        config = PolicyStore(str(tmp_path)).load("foo")
        assert config == PackageConfig(
            release_denylist=frozenset({"foo-1.3.0-py3-none-any.whl"}),
            version_limits=">=1.0",
        )

    def test_missing_policy(self, tmp_path):
        """No file means no policy."""
        assert PolicyStore(str(tmp_path)).load("foo") is None

    def test_missing_directory(self, tmp_path):
        """A policy directory that does not exist behaves like an empty one."""
        assert PolicyStore(str(tmp_path / "nope")).load("foo") is None

    def test_invalid_json_fails_open(self, tmp_path, caplog):
        """Unparseable JSON is logged and ignored."""
        _write(tmp_path, "foo.json", "{not json")
        with caplog.at_level("WARNING"):
            assert PolicyStore(str(tmp_path)).load("foo") is None
        assert "Ignoring policy for foo" in caplog.text

    def test_schema_violation_fails_open(self, tmp_path):
        """A document with the wrong shape is ignored."""
        _write(tmp_path, "foo.json", json.dumps({"release_denylist": "nope"}))
        assert PolicyStore(str(tmp_path)).load("foo") is None

    @pytest.mark.parametrize("package", ["", ".hidden", "../foo", "a/b", "a\\b"])
    def test_suspicious_names_are_refused(self, tmp_path, package):
        """Names that could escape the policy directory are never opened."""
        assert PolicyStore(str(tmp_path)).load(package) is None

    def test_path_for(self, tmp_path):
        """Policies live at <dir>/<package>.json."""
        store = PolicyStore(str(tmp_path))
        assert store.path_for("numpy") == os.path.join(str(tmp_path), "numpy.json")
        assert store.directory == str(tmp_path)
