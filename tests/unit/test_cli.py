"""
Unit tests for the command line: option parsing, settings precedence and
exit codes.
"""

import argparse
import json
from unittest.mock import patch

import pytest

from src import cli
from src.core.catalog_client import CatalogAuthenticationError


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    for var in ("MAGENTO_BASE_URL", "MAGENTO_ACCESS_TOKEN", "MAGENTO_STORE_CODE", "MAGENTO_MEDIA_ROOT"):
        monkeypatch.delenv(var, raising=False)


def _parse(tmp_path, *argv):
    return cli.build_parser().parse_args(["--config", str(tmp_path / "cfg.json"), *argv])


@pytest.mark.parametrize("value,expected", [
    ("true", True), ("1", True), ("Yes", True), ("on", True),
    ("false", False), ("0", False), ("no", False), ("OFF", False),
])
def test_str_to_bool(value, expected):
    assert cli.str_to_bool(value) is expected


def test_str_to_bool_rejects_other_values():
    with pytest.raises(argparse.ArgumentTypeError):
        cli.str_to_bool("SKU1")


def test_defaults_are_safe(tmp_path):
    args = _parse(tmp_path, "duplicate:remove")
    assert args.dryrun is True
    assert args.unlink is False
    assert args.products == []
    assert args.algorithm == "md5"


def test_flags_with_and_without_values(tmp_path):
    args = _parse(tmp_path, "duplicate:remove", "SKU1", "SKU2", "-d", "false", "-u")
    assert args.dryrun is False
    assert args.unlink is True
    assert args.products == ["SKU1", "SKU2"]


def test_long_options_after_skus(tmp_path):
    args = _parse(tmp_path, "duplicate:remove", "SKU-1", "SKU-2", "--dryrun", "false", "--unlink")
    assert args.products == ["SKU-1", "SKU-2"]
    assert args.dryrun is False
    assert args.unlink is True


def test_flag_followed_by_sku_is_rejected(tmp_path):
    with pytest.raises(SystemExit):
        _parse(tmp_path, "duplicate:remove", "-u", "SKU1")


def test_command_is_required(tmp_path):
    with pytest.raises(SystemExit):
        _parse(tmp_path)


def test_settings_precedence(tmp_path, monkeypatch):
    (tmp_path / "cfg.json").write_text(json.dumps({"catalog": {
        "base_url": "https://file.example.com",
        "access_token": "file-token",
        "media_root": "/srv/media",
    }}))
    monkeypatch.setenv("MAGENTO_BASE_URL", "https://env.example.com")
    monkeypatch.setenv("MAGENTO_ACCESS_TOKEN", "env-token")

    args = _parse(tmp_path, "duplicate:remove", "--token", "cli-token", "-d", "no")
    session = cli.build_session(args)

    assert session.catalog.media_root == "/srv/media"
    assert session.catalog.base_url == "https://env.example.com"
    assert session.catalog.access_token == "cli-token"
    assert session.run.dry_run is False
    assert session.run.unlink is False


def test_missing_settings_exit_with_usage_code(tmp_path, capsys):
    args = _parse(tmp_path, "duplicate:remove")

    assert cli.run_remove_duplicates(args) == cli.EXIT_USAGE
    assert "Missing configuration: base_url, access_token, media_root" in capsys.readouterr().err


def test_save_config_writes_file(tmp_path):
    args = _parse(tmp_path, "duplicate:remove", "--base-url", "https://shop", "--token", "t",
                  "--media-root", str(tmp_path), "--save-config")

    with patch("src.core.session.MagentoCatalogClient") as client_cls:
        client_cls.return_value.find_products_with_multiple_images.return_value = []
        assert cli.run_remove_duplicates(args) == cli.EXIT_SUCCESS

    stored = json.loads((tmp_path / "cfg.json").read_text())
    assert stored["catalog"]["base_url"] == "https://shop"


def test_successful_run_prints_report(tmp_path, capsys):
    args = _parse(tmp_path, "duplicate:remove", "--base-url", "https://shop", "--token", "t",
                  "--media-root", str(tmp_path))

    with patch("src.core.session.MagentoCatalogClient") as client_cls:
        client_cls.return_value.find_products_with_multiple_images.return_value = []
        assert cli.run_remove_duplicates(args) == cli.EXIT_SUCCESS
        client_cls.return_value.close.assert_called_once()

    out = capsys.readouterr().out
    assert "THIS IS A DRY-RUN, NO CHANGES WILL BE MADE!" in out
    assert "0 products found with 2 images or more." in out


def test_selection_failure_exits_with_failure_code(tmp_path, capsys):
    args = _parse(tmp_path, "duplicate:remove", "--base-url", "https://shop", "--token", "bad",
                  "--media-root", str(tmp_path))

    with patch("src.core.session.MagentoCatalogClient") as client_cls:
        client_cls.return_value.find_products_with_multiple_images.side_effect = \
            CatalogAuthenticationError("Authentication required: HTTP 401: denied")
        assert cli.run_remove_duplicates(args) == cli.EXIT_FAILURE

    assert "Could not select products" in capsys.readouterr().err
