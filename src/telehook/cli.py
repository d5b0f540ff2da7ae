from __future__ import annotations

from functools import partial
from pathlib import Path

import anyio
import msgspec
import typer
from rich.console import Console
from rich.pretty import Pretty

from . import __version__
from .api_models import Message
from .bot import Bot
from .config import BotSettings, ConfigError, load_config, load_settings
from .errors import ListenerError, TelehookError
from .logging import get_logger, setup_logging

logger = get_logger(__name__)


def _print_message(console: Console, message: Message, *, debug: bool) -> None:
    if debug:
        console.print(Pretty(msgspec.to_builtins(message), expand_all=True))
    else:
        console.print(str(message), markup=False, highlight=False)


async def _echo_message(
    bot: Bot, console: Console, message: Message, *, debug: bool
) -> None:
    _print_message(console, message, debug=debug)
    target = message.from_ or message.chat
    if target is None or not message.text:
        return
    try:
        await bot.send_message(target, message.text, preview=False)
    except TelehookError as e:
        logger.error(
            "echo.send_failed",
            chat_id=target.id,
            message_id=message.message_id,
            error=str(e),
            error_type=e.__class__.__name__,
        )


async def run_echo(
    settings: BotSettings, *, debug: bool = False, console: Console | None = None
) -> int:
    console = console or Console()
    try:
        bot = await Bot.create(settings.token)
    except TelehookError as e:
        logger.error("bot.create_failed", error=str(e))
        return 1

    exit_code = 0
    async with bot:
        try:
            await bot.set_webhook(settings.webhook_url)
        except TelehookError as e:
            logger.error("webhook.register_failed", error=str(e))
            return 1
        logger.info(
            "echo.started",
            username=bot.identity.username,
            webhook=settings.webhook_url,
        )
        try:
            async with bot.listen(settings.host, settings.port) as messages:
                async for message in messages:
                    await _echo_message(bot, console, message, debug=debug)
        except ListenerError as e:
            logger.error("webhook.listener_failed", error=str(e))
            exit_code = 1
    return exit_code


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit()


def echo(
    token: str | None = typer.Option(
        None, "--token", help="Telegram bot token (defaults to config)."
    ),
    webhook: str | None = typer.Option(
        None, "--webhook", help="Public webhook url (defaults to config)."
    ),
    host: str | None = typer.Option(None, "--host", help="Host to listen on."),
    port: int | None = typer.Option(None, "--port", help="Port to listen on."),
    config_path: Path | None = typer.Option(
        None, "--config", help="Path to a telehook.toml config file."
    ),
    debug: bool = typer.Option(
        False,
        "--debug/--no-debug",
        help="Dump full messages and log Telegram requests.",
    ),
) -> None:
    """Echo every incoming message back to its sender."""
    setup_logging(debug=debug)
    try:
        config, path = load_config(config_path)
        settings = load_settings(
            config, path, token=token, webhook_url=webhook, host=host, port=port
        )
    except ConfigError as e:
        typer.echo(f"error: {e}", err=True)
        raise typer.Exit(code=2) from e

    try:
        exit_code = anyio.run(partial(run_echo, settings, debug=debug))
    except KeyboardInterrupt:
        logger.info("shutdown.interrupted")
        raise typer.Exit(code=130) from None
    if exit_code:
        raise typer.Exit(code=exit_code)


def app_main(
    version: bool = typer.Option(
        False,
        "--version",
        help="Show the version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """Telegram webhook bot tools."""


def create_app() -> typer.Typer:
    app = typer.Typer(add_completion=False, no_args_is_help=True)
    app.callback()(app_main)
    app.command(name="echo")(echo)
    return app


def main() -> None:
    app = create_app()
    app()


if __name__ == "__main__":
    main()
