"""Tests for the CLI entry point."""

from __future__ import annotations

import pathlib

import pytest

from bridge_e2e import config, main


class TestParser:
    def test_defaults(self) -> None:
        params = main.input_from_args(main.build_parser().parse_args([]))
        assert params.amount == "0.00002"
        assert params.from_chain == "BFB"
        assert params.from_token == "INIT"
        assert params.to_chain == "BFB"
        assert params.to_token == "BFB"
        assert params.route_type == "Optimistic bridge"
        assert params.target_address is None

    def test_overrides(self) -> None:
        args = main.build_parser().parse_args(
            ["--amount", "1.5", "--from-chain", "interwoven", "--route-type", "Minitswap", "--target-address", "init1x"]
        )
        params = main.input_from_args(args)
        assert params.amount == "1.5"
        assert params.from_chain == "interwoven"
        assert params.route_type == "Minitswap"
        assert params.target_address == "init1x"


class TestMain:
    def test_missing_extension_exits_nonzero(self, monkeypatch: pytest.MonkeyPatch, tmp_path: pathlib.Path) -> None:
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("WRITE_TO_FILE", raising=False)
        monkeypatch.setenv("KEPLR_EXTENSION_PATH", str(tmp_path / "no-such-extension"))
        config.get_settings.cache_clear()
        try:
            assert main.main([]) == 1
        finally:
            config.get_settings.cache_clear()
