"""Command-line entry point: send one prompt and print the answer."""

from __future__ import annotations

import asyncio
import logging

import click
from rich.console import Console
from rich.markdown import Markdown

from brev_ai.client import ChatClient
from brev_ai.config import load_config
from brev_ai.errors import ChatClientError
from brev_ai.types import ChatResponse, Message

console = Console()


async def _run(
    client: ChatClient, prompt: str, system: str | None, options: dict,
) -> ChatResponse:
    async with client:
        return await client.chat(
            [Message(role="user", content=prompt)],
            system_message=system,
            **options,
        )


@click.command()
@click.argument("prompt")
@click.option("--config", "-c", "config_path", default=None,
              help="Path to brev_ai.yaml (auto-detected from CWD or ~/.config/brev-ai/)")
@click.option("--model", "-m", default=None, help="Model override")
@click.option("--temperature", "-t", type=float, default=None, help="Sampling temperature")
@click.option("--max-tokens", type=int, default=None, help="Maximum output tokens")
@click.option("--system", "-s", default=None, help="Prepend a system message")
@click.option("--user-name", default="", help="User display name for template variables")
@click.option("--location", default="", help="User location for template variables")
@click.option("--verbose", "-v", is_flag=True, help="Verbose logging")
def main(prompt: str, config_path: str | None, model: str | None,
         temperature: float | None, max_tokens: int | None, system: str | None,
         user_name: str, location: str, verbose: bool):
    """Ask the AI a single question."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG)
    else:
        logging.basicConfig(level=logging.WARNING)

    try:
        client = ChatClient(load_config(config_path))
        resp = asyncio.run(_run(client, prompt, system, {
            "model": model,
            "temperature": temperature,
            "max_tokens": max_tokens,
            "user_name": user_name,
            "user_location": location,
        }))
    except (ChatClientError, FileNotFoundError, ValueError) as e:
        console.print(f"[red]AI error: {e}[/red]")
        raise SystemExit(1)

    console.print(Markdown(resp.content))
    prompt_tokens, completion_tokens, total_tokens = resp.usage_tuple()
    console.print(
        f"[dim]Tokens: {prompt_tokens} → {completion_tokens} ({total_tokens})[/dim]"
    )


if __name__ == "__main__":
    main()
