"""Tests for path prefix mapping."""

from pathlib import Path

import pytest

from rtfm.path_utils import get_app_root, map_path


class TestMapPath:
    """Test map_path prefix handling."""

    def test_home_prefix(self):
        assert map_path("~") == str(Path.home().resolve())
        assert map_path("~/logs/run.log") == str(Path.home().resolve() / "logs" / "run.log")

    def test_app_prefix(self):
        assert map_path("@") == str(get_app_root())
        assert map_path("@/data") == str(get_app_root() / "data")

    def test_absolute_path(self, tmp_path):
        assert map_path(str(tmp_path)) == str(tmp_path.resolve())

    def test_relative_path_is_rejected(self):
        with pytest.raises(ValueError, match="Relative paths"):
            map_path("logs/run.log")

    def test_escape_is_rejected(self):
        with pytest.raises(ValueError, match="escapes home"):
            map_path("~/../../etc/passwd")

    def test_nul_is_rejected(self):
        with pytest.raises(ValueError, match="NUL"):
            map_path("~/a\x00b")


def test_get_app_root_is_package_directory():
    assert (get_app_root() / "__init__.py").exists()
