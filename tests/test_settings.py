"""Tests for the YAML settings loader."""
from config.settings import EngineConfig, Settings, get_settings, load_settings


class TestLoadSettings:
    def test_missing_file_gives_defaults(self, tmp_path):
        settings = load_settings(str(tmp_path / "absent.yaml"))
        assert settings.app_name == "DialogStack"
        assert settings.debug is False
        assert settings.engine == EngineConfig()

    def test_engine_section(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text(
            "app_name: SupportBot\n"
            "debug: true\n"
            "engine:\n"
            "  global_topic: everywhere\n"
            "  main_topic: welcome\n"
            "  auto_enter_main: false\n"
        )
        settings = load_settings(str(path))
        assert settings.app_name == "SupportBot"
        assert settings.debug is True
        assert settings.engine.global_topic == "everywhere"
        assert settings.engine.main_topic == "welcome"
        assert settings.engine.auto_enter_main is False

    def test_env_substitution(self, tmp_path, monkeypatch):
        monkeypatch.setenv("BOT_NAME", "EnvBot")
        monkeypatch.setenv("BOT_DEBUG", "yes")
        path = tmp_path / "settings.yaml"
        path.write_text("app_name: ${BOT_NAME}\ndebug: ${BOT_DEBUG}\n")
        settings = load_settings(str(path))
        assert settings.app_name == "EnvBot"
        assert settings.debug is True

    def test_unset_env_var_left_verbatim(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("app_name: ${DIALOGSTACK_TEST_UNSET_VAR}\n")
        assert load_settings(str(path)).app_name == "${DIALOGSTACK_TEST_UNSET_VAR}"

    def test_empty_file(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("")
        assert load_settings(str(path)) == Settings()

    def test_config_path_from_environment(self, tmp_path, monkeypatch):
        path = tmp_path / "custom.yaml"
        path.write_text("engine:\n  main_topic: start\n")
        monkeypatch.setenv("DIALOGSTACK_CONFIG", str(path))
        assert load_settings().engine.main_topic == "start"


class TestGetSettings:
    def test_cached(self, tmp_path, monkeypatch):
        path = tmp_path / "settings.yaml"
        path.write_text("app_name: Cached\n")
        monkeypatch.setenv("DIALOGSTACK_CONFIG", str(path))
        first = get_settings()
        path.write_text("app_name: Changed\n")
        assert get_settings() is first
        assert first.app_name == "Cached"
