"""Tests for ConfigService: show, check and init."""

from __future__ import annotations

from pathlib import Path

import pytest

from envlayer.config.models import REDACTED
from envlayer.config.resolver import ConfigResolver
from envlayer.services.config import ConfigService


@pytest.fixture
def service(resolver: ConfigResolver) -> ConfigService:
    return ConfigService(resolver)


def _with_secrets(config_dir: Path, text: str = "DATABASE_URL=postgresql://u:pw@db/shop\n") -> None:
    (config_dir / ".env.dev").write_text(text, encoding="utf-8")


class TestShow:
    def test_show_masks_secrets(self, config_dir: Path, service: ConfigService) -> None:
        _with_secrets(config_dir, "DATABASE_URL=postgresql://u:pw@db/shop\nSECRET_KEY=k\n")
        result = service.show("dev")
        assert result.ok
        assert result.op == "show"
        assert result.data["environment"] == "dev"
        settings = result.data["settings"]
        assert settings["app_name"] == "shop"
        assert settings["port"] == 9000
        assert settings["database_url"] == REDACTED
        assert settings["secret_key"] == REDACTED
        assert "pw@db" not in result.model_dump_json()

    def test_show_sources(self, config_dir: Path, service: ConfigService) -> None:
        _with_secrets(config_dir)
        result = service.show("dev", sources=True)
        sources = result.data["sources"]
        assert sources["host"] == "defaults"
        assert sources["port"] == "structural"
        assert sources["database_url"] == "secrets"
        assert sources["environment"] == "resolver"

    def test_show_lists_files(self, config_dir: Path, service: ConfigService) -> None:
        _with_secrets(config_dir)
        files = service.show("dev").data["files"]
        assert files == [str(config_dir / "config.dev.toml"), str(config_dir / ".env.dev")]

    def test_show_validation_failure(self, service: ConfigService) -> None:
        result = service.show("dev")
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "CONFIG_VALIDATION_ERROR"
        assert result.error.detail == {"key": "database_url"}

    def test_show_missing_file(self, config_dir: Path, service: ConfigService) -> None:
        result = service.show("prod")
        assert result.error is not None
        assert result.error.code == "CONFIG_NOT_FOUND"
        assert result.error.detail["path"] == str(config_dir / "config.prod.toml")

    def test_show_unknown_environment(self, service: ConfigService) -> None:
        result = service.show("qa")
        assert result.error is not None
        assert result.error.code == "UNKNOWN_ENVIRONMENT"
        assert result.error.detail["environment"] == "qa"


class TestCheck:
    def test_check_passes(self, config_dir: Path, service: ConfigService) -> None:
        _with_secrets(config_dir)
        result = service.check(["dev"])
        assert result.ok
        assert result.data == {"count": 1, "environments": {"dev": {"ok": True}}}

    def test_check_defaults_to_selected_environment(self, config_dir: Path) -> None:
        (config_dir / "config.test.toml").write_text('database_url = "sqlite://"\n')
        svc = ConfigService(ConfigResolver(config_dir, environ={"APP_ENV": "test"}))
        result = svc.check()
        assert result.ok
        assert list(result.data["environments"]) == ["test"]

    def test_check_unknown_selected_environment(self, config_dir: Path) -> None:
        svc = ConfigService(ConfigResolver(config_dir, environ={"APP_ENV": "qa"}))
        result = svc.check()
        assert result.error is not None
        assert result.error.code == "UNKNOWN_ENVIRONMENT"

    def test_check_reports_each_failure(self, config_dir: Path, service: ConfigService) -> None:
        _with_secrets(config_dir)
        (config_dir / "config.test.toml").write_text("port = [1\n")
        result = service.check(["dev", "test", "prod"])
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "CHECK_FAILED"
        assert "2 of 3" in result.error.message
        report = result.error.detail["environments"]
        assert report["dev"] == {"ok": True}
        assert report["test"]["code"] == "CONFIG_PARSE_ERROR"
        assert report["prod"]["code"] == "CONFIG_NOT_FOUND"

    def test_check_unreadable_secrets(
        self, config_dir: Path, service: ConfigService, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        _with_secrets(config_dir)
        secrets = config_dir / ".env.dev"
        real_read_bytes = Path.read_bytes

        def read_bytes(self: Path) -> bytes:
            if self == secrets:
                raise PermissionError(13, "Permission denied", str(self))
            return real_read_bytes(self)

        monkeypatch.setattr(Path, "read_bytes", read_bytes)
        result = service.check(["dev"])
        assert result.error is not None
        report = result.error.detail["environments"]["dev"]
        assert report["code"] == "CONFIG_PARSE_ERROR"
        assert report["path"] == str(secrets)


class TestInit:
    @pytest.fixture
    def service(self, tmp_path: Path) -> ConfigService:
        # Not built on config_dir, which would pre-create tmp_path / "config".
        return ConfigService(ConfigResolver(tmp_path / "unused", environ={}))

    def test_creates_starter_files(self, tmp_path: Path, service: ConfigService) -> None:
        target = tmp_path / "project" / "config"
        result = service.init(target, ["dev", "prod"], app_name="billing")
        assert result.ok
        assert (target / "config.dev.toml").is_file()
        assert (target / "config.prod.toml").is_file()
        assert (target / ".env.example").is_file()
        assert ".env.*" in (target / ".gitignore").read_text()
        assert len(result.data["created"]) == 4
        assert result.data["skipped"] == []

    def test_generated_dev_config_resolves(self, tmp_path: Path, service: ConfigService) -> None:
        target = tmp_path / "config"
        service.init(target, ["dev", "prod"], app_name="billing")
        settings = ConfigResolver(target, environ={}).resolve("dev")
        assert settings.app_name == "billing"
        assert settings.debug is True
        assert settings.log_level == "DEBUG"

    @pytest.mark.parametrize("name", ['my "app"', "C:\\apps\\billing", "tab\there"])
    def test_generated_config_quotes_app_name(
        self, tmp_path: Path, service: ConfigService, name: str
    ) -> None:
        target = tmp_path / "config"
        service.init(target, ["dev"], app_name=name)
        svc = ConfigService(ConfigResolver(target, environ={}))
        assert svc.check(["dev"]).ok
        assert ConfigResolver(target, environ={}).resolve("dev").app_name == name

    def test_generated_prod_config_needs_secret(self, tmp_path: Path, service: ConfigService) -> None:
        target = tmp_path / "config"
        service.init(target, ["prod"])
        svc = ConfigService(ConfigResolver(target, environ={}))
        result = svc.check(["prod"])
        assert result.error is not None
        assert result.error.detail["environments"]["prod"]["key"] == "database_url"

        svc = ConfigService(ConfigResolver(target, environ={"DATABASE_URL": "postgresql://db"}))
        assert svc.check(["prod"]).ok

    def test_default_app_name_from_project_dir(
        self, tmp_path: Path, service: ConfigService
    ) -> None:
        target = tmp_path / "inventory" / "config"
        service.init(target, ["dev"])
        settings = ConfigResolver(target, environ={}).resolve("dev")
        assert settings.app_name == "inventory"

    def test_existing_files_skipped(self, tmp_path: Path, service: ConfigService) -> None:
        target = tmp_path / "config"
        target.mkdir()
        (target / "config.dev.toml").write_text("port = 1\n")
        result = service.init(target, ["dev"])
        assert result.ok
        assert str(target / "config.dev.toml") in result.data["skipped"]
        assert result.warnings
        assert (target / "config.dev.toml").read_text() == "port = 1\n"

    def test_force_overwrites(self, tmp_path: Path, service: ConfigService) -> None:
        target = tmp_path / "config"
        target.mkdir()
        (target / "config.dev.toml").write_text("port = 1\n")
        service.init(target, ["dev"], force=True)
        assert "port = 8000" in (target / "config.dev.toml").read_text()

    def test_gitignore_rules_appended_once(self, tmp_path: Path, service: ConfigService) -> None:
        target = tmp_path / "config"
        target.mkdir()
        (target / ".gitignore").write_text("*.pyc")
        service.init(target, ["dev"])
        service.init(target, ["dev"])
        lines = (target / ".gitignore").read_text().splitlines()
        assert lines == ["*.pyc", ".env.*", "!.env.example"]

    def test_unknown_environment(self, tmp_path: Path, service: ConfigService) -> None:
        result = service.init(tmp_path / "config", ["dev", "qa"])
        assert result.error is not None
        assert result.error.code == "UNKNOWN_ENVIRONMENT"
        assert not (tmp_path / "config").exists()
