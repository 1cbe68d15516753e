"""Tests for the brev-ai command line."""

from unittest.mock import AsyncMock, patch

from click.testing import CliRunner

from brev_ai import cli
from brev_ai.config import ClientConfig
from brev_ai.errors import RetriesExhaustedError
from brev_ai.types import ChatResponse, Choice, UsageStats


def _config() -> ClientConfig:
    return ClientConfig(auth_token="tok")


class TestCli:
    def test_prints_answer_and_usage(self):
        resp = ChatResponse(
            id="s", model="m",
            choices=[Choice(content="Forty-two")],
            usage=UsageStats(3, 5, 8),
        )
        with patch.object(cli, "load_config", return_value=_config()), \
             patch.object(cli.ChatClient, "chat", new_callable=AsyncMock) as mock_chat:
            mock_chat.return_value = resp
            result = CliRunner().invoke(
                cli.main, ["meaning of life?", "-t", "0.5", "--system", "Be brief"],
            )

        assert result.exit_code == 0, result.output
        assert "Forty-two" in result.output
        assert "3 → 5 (8)" in result.output
        kwargs = mock_chat.call_args.kwargs
        assert kwargs["temperature"] == 0.5
        assert kwargs["system_message"] == "Be brief"
        assert mock_chat.call_args.args[0][0].content == "meaning of life?"

    def test_error_exit_code(self):
        err = RetriesExhaustedError(4, TimeoutError("slow"))
        with patch.object(cli, "load_config", return_value=_config()), \
             patch.object(cli.ChatClient, "chat", new_callable=AsyncMock) as mock_chat:
            mock_chat.side_effect = err
            result = CliRunner().invoke(cli.main, ["hi"])

        assert result.exit_code == 1
        assert "failed after 4 attempts" in result.output

    def test_missing_token(self):
        with patch.object(cli, "load_config", return_value=ClientConfig()):
            result = CliRunner().invoke(cli.main, ["hi"])
        assert result.exit_code == 1
        assert "ZAI_AUTH_TOKEN" in result.output
