"""Tests for configuration management."""

from pathlib import Path

import pytest

from .lib import (
    EnvConfig,
    EnvVar,
    _find_repo_root,
    get_environment,
    get_environment_info,
    get_json_indent,
    get_log_level,
    get_store_path,
    list_environment_variables,
)

# =============================================================================
# Tests for get_environment (main interface)
# =============================================================================


class TestGetEnvironment:
    """Tests for the unified get_environment interface."""

    @pytest.mark.unit
    def test_returns_default_when_not_set(self, monkeypatch):
        """Returns default value when env var is not set."""
        monkeypatch.delenv("FORMGRID_JSON_INDENT", raising=False)
        assert get_environment(EnvVar.FORMGRID_JSON_INDENT) == 2

    @pytest.mark.unit
    def test_override_takes_priority(self, monkeypatch):
        """Override parameter takes highest priority."""
        monkeypatch.setenv("FORMGRID_JSON_INDENT", "8")
        assert get_environment(EnvVar.FORMGRID_JSON_INDENT, override=4) == 4

    @pytest.mark.unit
    def test_int_type_conversion(self, monkeypatch):
        """Integer type conversion from string."""
        monkeypatch.setenv("FORMGRID_JSON_INDENT", "4")
        result = get_environment(EnvVar.FORMGRID_JSON_INDENT)
        assert result == 4
        assert isinstance(result, int)

    @pytest.mark.unit
    def test_invalid_int_falls_back_to_default(self, monkeypatch, caplog):
        """Unparseable integers resolve to the default, with a warning."""
        monkeypatch.setenv("FORMGRID_JSON_INDENT", "wide")
        assert get_environment(EnvVar.FORMGRID_JSON_INDENT) == 2
        assert "FORMGRID_JSON_INDENT" in caplog.text

    @pytest.mark.unit
    def test_empty_value_is_unset(self, monkeypatch):
        """An empty variable behaves like an unset one."""
        monkeypatch.setenv("FORMGRID_JSON_INDENT", "")
        assert get_environment(EnvVar.FORMGRID_JSON_INDENT) == 2

    @pytest.mark.unit
    def test_path_type_conversion(self, monkeypatch, tmp_path):
        """Path variables are converted to Path objects."""
        monkeypatch.setenv("FORMGRID_STORE_PATH", str(tmp_path / "forms.db"))
        result = get_environment(EnvVar.FORMGRID_STORE_PATH)
        assert isinstance(result, Path)
        assert result.name == "forms.db"


class TestEnvironmentInfo:
    """Tests for metadata helpers."""

    @pytest.mark.unit
    def test_info_returns_config(self):
        """get_environment_info exposes the EnvConfig."""
        info = get_environment_info(EnvVar.FORMGRID_LOG_LEVEL)
        assert isinstance(info, EnvConfig)
        assert info.name == "FORMGRID_LOG_LEVEL"
        assert info.default == "INFO"

    @pytest.mark.unit
    def test_list_by_category(self):
        """Filtering by category returns only matching variables."""
        store_vars = list_environment_variables("store")
        assert store_vars == [EnvVar.FORMGRID_STORE_PATH]
        assert len(list_environment_variables()) == len(EnvVar)


class TestConvenienceFunctions:
    """Tests for derived configuration helpers."""

    @pytest.mark.unit
    def test_store_path_override(self, tmp_path):
        """Explicit override wins."""
        assert get_store_path(tmp_path / "x.db") == tmp_path / "x.db"

    @pytest.mark.unit
    def test_store_path_from_env(self, monkeypatch, tmp_path):
        """Environment variable is used when no override is given."""
        monkeypatch.setenv("FORMGRID_STORE_PATH", str(tmp_path / "env.db"))
        assert get_store_path() == tmp_path / "env.db"

    @pytest.mark.unit
    def test_store_path_default_under_repo_root(self, monkeypatch):
        """Default store lives in .formgrid under the repository root."""
        monkeypatch.delenv("FORMGRID_STORE_PATH", raising=False)
        path = get_store_path()
        assert path.parent.name == ".formgrid"
        assert path.name == "forms.db"

    @pytest.mark.unit
    def test_log_level_upper_cased(self, monkeypatch):
        """Log level names are normalised."""
        monkeypatch.setenv("FORMGRID_LOG_LEVEL", "debug")
        assert get_log_level() == "DEBUG"

    @pytest.mark.unit
    def test_json_indent_override(self):
        """JSON indent accepts an override."""
        assert get_json_indent(0) == 0


class TestFindRepoRoot:
    """Tests for repository root detection."""

    @pytest.mark.unit
    def test_finds_marker(self, tmp_path):
        """Walks up until a pyproject.toml is found."""
        (tmp_path / "pyproject.toml").write_text("")
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        assert _find_repo_root(nested) == tmp_path.resolve()

    @pytest.mark.unit
    def test_no_marker(self, tmp_path, monkeypatch):
        """Without any marker up to the filesystem root, a RuntimeError names the fix."""
        monkeypatch.setattr("formgrid.config.lib.ROOT_MARKERS", ("no-such-marker.toml",))
        with pytest.raises(RuntimeError, match="FORMGRID_STORE_PATH"):
            _find_repo_root(tmp_path)
