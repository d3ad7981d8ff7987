"""
CLI Tests.

The client is patched out; only argument handling, output and exit
codes are exercised.
"""

import json
from unittest.mock import MagicMock, patch

import pytest

from oneinch_sdk import cli
from oneinch_sdk.config import ClientConfig
from oneinch_sdk.exceptions import ApiError, ConfigurationError


WETH = "0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2"


@pytest.fixture
def mock_client():
    client = MagicMock()
    with patch.object(cli, "OneInchClient", return_value=client), \
            patch.object(cli.ClientConfig, "from_env", return_value=ClientConfig(api_key="k")):
        yield client


class TestParser:
    """Tests for argument parsing."""

    def test_price_addresses_optional(self):
        """Test price accepts no addresses."""
        args = cli.create_parser().parse_args(["price", "1"])

        assert args.command == "price"
        assert args.addresses == []

    def test_command_required(self):
        """Test a subcommand is mandatory."""
        with pytest.raises(SystemExit):
            cli.create_parser().parse_args([])


class TestMain:
    """Tests for main()."""

    def test_success_prints_json(self, mock_client, capsys):
        """Test the result is printed to stdout."""
        mock_client.price.get_prices.return_value.get.return_value = {WETH.lower(): "3500"}

        code = cli.main(["--timeout", "3", "price", "1", WETH, "--currency", "USD"])

        assert code == 0
        assert json.loads(capsys.readouterr().out) == {WETH.lower(): "3500"}
        mock_client.price.get_prices.assert_called_once_with(1, [WETH], currency="USD")
        mock_client.price.get_prices.return_value.get.assert_called_once_with(timeout=3.0)
        mock_client.close.assert_called_once()

    def test_api_error_exit_code(self, mock_client, capsys):
        """Test API failures exit with 1 and the envelope on stderr."""
        mock_client.balance.get_balances.return_value.get.side_effect = ApiError.from_message(
            "HTTP 500: boom", http_status=500,
        )

        code = cli.main(["balances", "1", WETH])

        assert code == 1
        error = json.loads(capsys.readouterr().err)
        assert error["kind"] == "API_ERROR"
        assert error["http_status"] == 500
        assert error["error_type"] == "ApiError"
        mock_client.close.assert_called_once()

    def test_configuration_error_exit_code(self, capsys):
        """Test a missing API key exits with 2."""
        with patch.object(cli.ClientConfig, "from_env", side_effect=ConfigurationError("API key not found")):
            code = cli.main(["search", "1", "usdc"])

        assert code == 2
        assert "API key not found" in capsys.readouterr().err
