"""Unit tests for CLI argument parsing."""
from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from aptos_portfolio.cli import build_parser, main


class TestBuildParser:
    def test_serve_command(self) -> None:
        parser = build_parser()
        args = parser.parse_args(["serve"])
        assert args.command == "serve"
        assert args.host is None
        assert args.port is None

    def test_serve_overrides(self) -> None:
        parser = build_parser()
        args = parser.parse_args(["serve", "--host", "127.0.0.1", "--port", "9000"])
        assert args.host == "127.0.0.1"
        assert args.port == 9000

    def test_portfolio_command(self) -> None:
        parser = build_parser()
        args = parser.parse_args(["portfolio", "0x1"])
        assert args.command == "portfolio"
        assert args.address == "0x1"

    def test_config_flag(self) -> None:
        parser = build_parser()
        args = parser.parse_args(["--config", "/tmp/c.yaml", "serve"])
        assert args.config == "/tmp/c.yaml"

    def test_log_level_flag(self) -> None:
        parser = build_parser()
        args = parser.parse_args(["--log-level", "DEBUG", "serve"])
        assert args.log_level == "DEBUG"

    def test_no_command(self) -> None:
        parser = build_parser()
        args = parser.parse_args([])
        assert args.command is None


class TestMain:
    def test_no_command_exits_1(self) -> None:
        with pytest.raises(SystemExit) as exc:
            main([])
        assert exc.value.code == 1

    def test_serve_runs_server(self) -> None:
        with patch("aptos_portfolio.cli.load_config") as load, patch(
            "aptos_portfolio.cli.run_server"
        ) as run, patch("aptos_portfolio.cli.configure_logging"):
            main(["serve", "--port", "9001"])

        run.assert_called_once_with(load.return_value, host=None, port=9001)

    def test_portfolio_invalid_address_exits_2(self, capsys: pytest.CaptureFixture[str]) -> None:
        with patch("aptos_portfolio.cli.load_config"), patch(
            "aptos_portfolio.cli.configure_logging"
        ), patch("aptos_portfolio.cli.PortfolioAggregator") as aggregator:
            with pytest.raises(SystemExit) as exc:
                main(["portfolio", "not-an-address"])

        assert exc.value.code == 2
        assert "Invalid Aptos address: not-an-address" in capsys.readouterr().err
        aggregator.from_config.assert_not_called()

    def test_portfolio_prints_json(self, capsys: pytest.CaptureFixture[str]) -> None:
        portfolio = MagicMock()
        portfolio.to_dict.return_value = {"totals": {"totalValueUsd": 1.0}}
        with patch("aptos_portfolio.cli.load_config"), patch(
            "aptos_portfolio.cli.configure_logging"
        ), patch("aptos_portfolio.cli.PortfolioAggregator") as aggregator:
            aggregator.from_config.return_value.build_portfolio = AsyncMock(return_value=portfolio)
            main(["portfolio", "0x1"])

        aggregator.from_config.return_value.build_portfolio.assert_awaited_once_with("0x1")
        assert '"totalValueUsd": 1.0' in capsys.readouterr().out
