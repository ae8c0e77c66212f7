"""
包目录配置测试
"""
import pytest

from flattenf.core.catalog import (
    DEFAULT_VERIFY_PATHS,
    CatalogError,
    load_catalog,
    parse_catalog,
)

from conftest import catalog_from_names


class TestDefaultCatalog:
    """测试内置目录"""

    def test_loads(self):
        catalog = load_catalog()
        assert catalog.names()[0] == "nvim"
        assert "dolphinrc" in catalog.names()
        assert catalog.branch == "flatten-migration"
        assert catalog.proxy_style == "relative"
        assert catalog.verify_paths == DEFAULT_VERIFY_PATHS

    def test_special_packages(self):
        catalog = load_catalog()
        zsh = catalog.get("zsh")
        assert zsh.target_path == ".config/.zshrc"
        assert zsh.proxy is False
        assert catalog.get("system").target_path == ".config"
        assert catalog.get("kitty").target_path == ".config/kitty"


class TestParseCatalog:
    """测试目录解析和校验"""

    def test_custom_file(self, tmp_path):
        path = tmp_path / "catalog.toml"
        path.write_text(
            '[settings]\nbranch = "flat"\nproxy_style = "absolute"\n'
            '[verify]\npaths = ["~/.config/mpv"]\n'
            '[[packages]]\nname = "mpv"\n'
        )

        catalog = load_catalog(path)

        assert catalog.branch == "flat"
        assert catalog.proxy_style == "absolute"
        assert catalog.verify_paths == ("~/.config/mpv",)
        assert catalog.source == path

    def test_invalid_toml(self, tmp_path):
        path = tmp_path / "catalog.toml"
        path.write_text("[[packages]\nname=")
        with pytest.raises(CatalogError):
            load_catalog(path)

    def test_duplicate_name(self):
        with pytest.raises(CatalogError):
            parse_catalog({"packages": [{"name": "nvim"}, {"name": "nvim"}]})

    def test_missing_name(self):
        with pytest.raises(CatalogError):
            parse_catalog({"packages": [{"target": ".config/x"}]})

    @pytest.mark.parametrize("target", ["/etc/nvim", "../nvim", ".config/../.."])
    def test_target_must_stay_inside_package(self, target):
        with pytest.raises(CatalogError):
            parse_catalog({"packages": [{"name": "nvim", "target": target}]})

    def test_unknown_proxy_style(self):
        with pytest.raises(CatalogError):
            parse_catalog({"settings": {"proxy_style": "hard"}})

    def test_catalog_is_immutable(self):
        catalog = catalog_from_names(["nvim"])
        with pytest.raises(AttributeError):
            catalog.branch = "other"


class TestSelect:
    """测试 --package / --continue-from 筛选"""

    def setup_method(self):
        self.catalog = catalog_from_names(["nvim", "kitty", "hypr"])

    def test_all(self):
        assert [p.name for p in self.catalog.select()] == ["nvim", "kitty", "hypr"]

    def test_package(self):
        assert [p.name for p in self.catalog.select(package="kitty")] == ["kitty"]

    def test_continue_from(self):
        assert [p.name for p in self.catalog.select(continue_from="kitty")] == ["kitty", "hypr"]

    def test_unknown(self):
        with pytest.raises(KeyError):
            self.catalog.select(package="emacs")
        with pytest.raises(KeyError):
            self.catalog.select(continue_from="emacs")
