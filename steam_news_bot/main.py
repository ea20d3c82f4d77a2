"""Process entry point for Steam News Telegram Bot."""

import json
import signal
import sys
import threading
from datetime import UTC, datetime

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from dotenv import load_dotenv

from .config import Config
from .dispatcher import ChunkDispatcher
from .errors import ConfigError
from .feed import FeedSource
from .logging_config import create_execution_logger, setup_structured_logging
from .poller import Poller
from .snapshot import FileSnapshotStore
from .telegram import TelegramSink

TOKEN_SECRET_KEYS = ("token", "bot_token", "telegram_token", "telegram_bot_token")


def get_telegram_token(secret_name: str, aws_region: str, execution_id: str) -> str:
    """
    Retrieve the Telegram bot token from AWS Secrets Manager.

    Both plain string secrets and JSON objects holding the token under one
    of ``TOKEN_SECRET_KEYS`` are accepted. The token itself is never logged.

    Args:
        secret_name: Name of the secret in Secrets Manager
        aws_region: AWS region for Secrets Manager client
        execution_id: Execution ID for logging context

    Returns:
        Telegram bot token

    Raises:
        ConfigError: If the secret cannot be retrieved or holds no token
    """
    secrets_logger = create_execution_logger("config", execution_id)

    if not secret_name or not secret_name.strip():
        raise ConfigError("Secret name cannot be empty")

    if not aws_region or not aws_region.strip():
        raise ConfigError("AWS region cannot be empty")

    try:
        secrets_logger.info(
            f"Retrieving Telegram token from Secrets Manager: {secret_name}"
        )
        secrets_client = boto3.client("secretsmanager", region_name=aws_region)
        response = secrets_client.get_secret_value(SecretId=secret_name)
    except ClientError as e:
        error_code = e.response.get("Error", {}).get("Code", "Unknown")
        secrets_logger.error(
            f"AWS Secrets Manager error retrieving {secret_name}: {error_code}"
        )
        raise ConfigError(f"Failed to retrieve secret {secret_name}") from e
    except BotoCoreError as e:
        secrets_logger.error(
            f"AWS client error retrieving {secret_name}: {type(e).__name__}"
        )
        raise ConfigError(f"Failed to retrieve secret {secret_name}") from e

    secret_value = response.get("SecretString")
    if not secret_value or not secret_value.strip():
        raise ConfigError(f"Secret {secret_name} does not contain a string value")

    try:
        secret_data = json.loads(secret_value)
    except json.JSONDecodeError:
        secrets_logger.info("Retrieved token from plain text secret")
        return secret_value.strip()

    if not isinstance(secret_data, dict):
        raise ConfigError(f"JSON secret {secret_name} must be an object")

    for key in TOKEN_SECRET_KEYS:
        value = secret_data.get(key)
        if isinstance(value, str) and value.strip():
            secrets_logger.info("Retrieved token from JSON secret", secret_key=key)
            return value.strip()

    raise ConfigError(f"No token found in JSON secret {secret_name}")


def build_poller(config: Config, execution_id: str) -> Poller:
    """Wire the pipeline components from configuration."""
    bot_token = config.bot_token.strip()
    if not bot_token:
        bot_token = get_telegram_token(
            config.telegram_secret_name, config.aws_region, execution_id
        )

    telegram_config = config.get_telegram_config(bot_token)
    snapshot_config = config.get_snapshot_config()

    sink = TelegramSink(telegram_config, execution_id=execution_id)
    dispatcher = ChunkDispatcher(
        sink,
        max_len=telegram_config.max_message_length,
        parse_mode=telegram_config.parse_mode,
        execution_id=execution_id,
    )
    return Poller(
        config=config.get_poller_config(),
        feed_source=FeedSource(execution_id=execution_id),
        snapshot_store=FileSnapshotStore(
            snapshot_config.directory, snapshot_config.name, execution_id=execution_id
        ),
        dispatcher=dispatcher,
        destination_id=telegram_config.chat_id,
        execution_id=execution_id,
    )


def main() -> int:
    """Load configuration and poll until SIGINT or SIGTERM."""
    load_dotenv()
    config = Config()
    setup_structured_logging(config.log_level)

    execution_id = f"run_{datetime.now(UTC).strftime('%Y%m%d_%H%M%S_%f')}"
    main_logger = create_execution_logger("main", execution_id)

    try:
        config.validate()
        poller = build_poller(config, execution_id)
    except ConfigError as e:
        main_logger.error(f"Invalid configuration: {e}", error=str(e))
        return 1

    stop_event = threading.Event()

    def _request_stop(signum, frame):
        main_logger.info(
            f"Received {signal.Signals(signum).name}, stopping after the current cycle"
        )
        stop_event.set()

    signal.signal(signal.SIGINT, _request_stop)
    signal.signal(signal.SIGTERM, _request_stop)

    poller.run(stop_event)
    main_logger.info("Shutdown complete")
    return 0


if __name__ == "__main__":
    sys.exit(main())
