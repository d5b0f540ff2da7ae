from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass
from pathlib import Path

# Environment variable names for secrets
ENV_BOT_TOKEN = "TELEHOOK_BOT_TOKEN"
ENV_WEBHOOK_URL = "TELEHOOK_WEBHOOK_URL"

LOCAL_CONFIG_NAME = Path(".telehook") / "telehook.toml"
HOME_CONFIG_PATH = Path.home() / ".telehook" / "telehook.toml"

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 1986


class ConfigError(RuntimeError):
    pass


@dataclass(frozen=True, slots=True)
class BotSettings:
    token: str
    webhook_url: str
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT


def _config_candidates() -> list[Path]:
    candidates = [Path.cwd() / LOCAL_CONFIG_NAME, HOME_CONFIG_PATH]
    if candidates[0] == candidates[1]:
        return [candidates[0]]
    return candidates


def _read_config(cfg_path: Path) -> dict:
    try:
        raw = cfg_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise ConfigError(f"Missing config file {cfg_path}.") from None
    except OSError as e:
        raise ConfigError(f"Failed to read config file {cfg_path}: {e}") from e
    try:
        return tomllib.loads(raw)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Malformed TOML in {cfg_path}: {e}") from None


def load_config(path: str | Path | None = None) -> tuple[dict, Path | None]:
    """Read the TOML config.

    An explicit ``path`` must exist. Otherwise the local and home locations
    are tried in order and an empty config is returned when neither exists,
    since every value can also come from the environment or the command line.
    """
    if path:
        cfg_path = Path(path).expanduser()
        return _read_config(cfg_path), cfg_path

    for candidate in _config_candidates():
        if candidate.is_file():
            return _read_config(candidate), candidate
    return {}, None


def _env_or_config_str(
    config: dict, config_path: Path | None, key: str, env_name: str
) -> str | None:
    env_value = os.environ.get(env_name)
    if env_value and env_value.strip():
        return env_value.strip()

    value = config.get(key)
    if value is None:
        return None
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(
            f"Invalid `{key}` in {config_path}; expected a non-empty string."
        )
    return value.strip()


def get_bot_token(config: dict, config_path: Path | None) -> str | None:
    """Get bot token from environment variable or config file.

    Environment variable TELEHOOK_BOT_TOKEN takes precedence over config file.
    """
    return _env_or_config_str(config, config_path, "bot_token", ENV_BOT_TOKEN)


def get_webhook_url(config: dict, config_path: Path | None) -> str | None:
    """Get webhook url from environment variable or config file.

    Environment variable TELEHOOK_WEBHOOK_URL takes precedence over config file.
    """
    return _env_or_config_str(config, config_path, "webhook_url", ENV_WEBHOOK_URL)


def get_listen_address(config: dict, config_path: Path | None) -> tuple[str, int]:
    host = config.get("host", DEFAULT_HOST)
    if not isinstance(host, str) or not host.strip():
        raise ConfigError(
            f"Invalid `host` in {config_path}; expected a non-empty string."
        )
    port = config.get("port", DEFAULT_PORT)
    if isinstance(port, bool) or not isinstance(port, int) or not 0 < port < 65536:
        raise ConfigError(
            f"Invalid `port` in {config_path}; expected an integer between 1 and 65535."
        )
    return host.strip(), port


def load_settings(
    config: dict,
    config_path: Path | None,
    *,
    token: str | None = None,
    webhook_url: str | None = None,
    host: str | None = None,
    port: int | None = None,
) -> BotSettings:
    """Merge explicit values (command-line) over environment and config file."""
    token = token or get_bot_token(config, config_path)
    if not token:
        raise ConfigError(
            f"Missing bot token. Pass --token, set {ENV_BOT_TOKEN} "
            "or add `bot_token` to the config file."
        )
    webhook_url = webhook_url or get_webhook_url(config, config_path)
    if not webhook_url:
        raise ConfigError(
            f"Missing webhook url. Pass --webhook, set {ENV_WEBHOOK_URL} "
            "or add `webhook_url` to the config file."
        )
    cfg_host, cfg_port = get_listen_address(config, config_path)
    return BotSettings(
        token=token,
        webhook_url=webhook_url,
        host=host or cfg_host,
        port=port or cfg_port,
    )
