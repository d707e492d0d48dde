"""Tests for settings profiles."""

import pytest
from xmatch import (
    ConfigError,
    DEFAULT_SETTINGS,
    Setting,
    XmlEquivalenceMatcher,
    load_profile,
    load_profiles,
    parse_profile,
    xml_text,
)


PROFILES = """
profiles:
  strict:
    base: none
    enable: [IGNORE_COMMENTS]
  lenient:
    base: default
    disable: [normalize_whitespace]
  plain: {}
"""


class TestParseProfile:
    """Test single profile mappings."""

    def test_default_base(self):
        """Test profiles start from the default settings."""
        assert parse_profile({}) == DEFAULT_SETTINGS
        assert parse_profile(None) == DEFAULT_SETTINGS

    def test_empty_base(self):
        """Test the none base starts from nothing."""
        settings = parse_profile({"base": "none", "enable": ["only_compare_similarity"]})
        assert settings == frozenset({Setting.ONLY_COMPARE_SIMILARITY})

    def test_single_name(self):
        """Test a bare string is accepted for one setting."""
        settings = parse_profile({"disable": "IGNORE_COMMENTS"})
        assert Setting.IGNORE_COMMENTS not in settings

    def test_unknown_setting(self):
        """Test unknown setting names are rejected."""
        with pytest.raises(ConfigError):
            parse_profile({"enable": ["IGNORE_EVERYTHING"]})

    def test_unknown_base(self):
        """Test unknown bases are rejected."""
        with pytest.raises(ConfigError):
            parse_profile({"base": "strictest"})

    def test_not_a_list(self):
        """Test enable must be a list."""
        with pytest.raises(ConfigError):
            parse_profile({"enable": {"IGNORE_COMMENTS": True}})


class TestLoadProfiles:
    """Test profile files."""

    def setup_method(self):
        self.profiles_text = PROFILES

    def test_load_all(self, tmp_path):
        """Test every profile is loaded by name."""
        path = tmp_path / "profiles.yaml"
        path.write_text(self.profiles_text)

        profiles = load_profiles(path)

        assert set(profiles) == {"strict", "lenient", "plain"}
        assert profiles["strict"] == frozenset({Setting.IGNORE_COMMENTS})
        assert profiles["lenient"] == DEFAULT_SETTINGS - {Setting.NORMALIZE_WHITESPACE}
        assert profiles["plain"] == DEFAULT_SETTINGS

    def test_load_one(self, tmp_path):
        """Test loading a profile and using it with a matcher."""
        path = tmp_path / "profiles.yaml"
        path.write_text(self.profiles_text)

        settings = load_profile(str(path), "strict")
        matcher = XmlEquivalenceMatcher(xml_text("<a><!--x-->1</a>"), settings)

        assert matcher.matches(xml_text("<a>1</a>"))
        assert not matcher.matches(xml_text("<a> 1 </a>"))

    def test_unknown_profile(self, tmp_path):
        """Test asking for a missing profile."""
        path = tmp_path / "profiles.yaml"
        path.write_text(self.profiles_text)

        with pytest.raises(ConfigError):
            load_profile(path, "missing")

    def test_missing_file(self, tmp_path):
        """Test a missing file is a configuration error."""
        with pytest.raises(ConfigError) as exc_info:
            load_profiles(tmp_path / "nope.yaml")
        assert exc_info.value.path.endswith("nope.yaml")

    def test_invalid_yaml(self, tmp_path):
        """Test YAML syntax errors are wrapped."""
        path = tmp_path / "profiles.yaml"
        path.write_text("profiles: [unclosed")

        with pytest.raises(ConfigError):
            load_profiles(path)

    def test_missing_profiles_key(self, tmp_path):
        """Test files without a profiles mapping are rejected."""
        path = tmp_path / "profiles.yaml"
        path.write_text("settings: []\n")

        with pytest.raises(ConfigError):
            load_profiles(path)

    def test_invalid_profile_names_file(self, tmp_path):
        """Test errors in one profile mention the profile."""
        path = tmp_path / "profiles.yaml"
        path.write_text("profiles:\n  broken:\n    enable: [NOPE]\n")

        with pytest.raises(ConfigError) as exc_info:
            load_profiles(path)
        assert "broken" in str(exc_info.value)
