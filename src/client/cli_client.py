"""Command-line client for generating speech with an encrypted API key.

Subcommands:
    setup   Prompt for the API key and store it encrypted under a password
    say     Generate speech for a line of text and write it as a WAV file
    forget  Delete the stored API key

The vault password is read from the environment variable named in the config
(VOICE_VAULT_PASSWORD by default) or prompted for interactively. It is never
stored.
"""

import argparse
import asyncio
import getpass
import logging
import os
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Final

import yaml
from pydantic import ValidationError

from common.errors import (
    AudioFormatError,
    AuthenticationFailedError,
    CredentialError,
    CredentialMissingError,
    CryptoUnavailableError,
    MalformedBlobError,
    PasswordMissingError,
    RemoteCallExhaustedError,
    RemoteCallRejectedError,
    SampleRateUnresolvableError,
)
from speech.adapters.adapter_mock import MockSpeechClient
from speech.audio.framing import read_wav_header
from speech.client import GeminiTTSClient
from speech.config import ClientConfig
from speech.generator import SpeechGenerator, SpeechResult
from speech.utils.logging import log_event, setup_logging
from vault.cipher import CredentialCipher
from vault.store import CredentialVault, JsonFileStore

# Exit codes
EXIT_OK: Final[int] = 0
EXIT_REMOTE_ERROR: Final[int] = 1
EXIT_CREDENTIAL_ERROR: Final[int] = 2
EXIT_AUDIO_ERROR: Final[int] = 3
EXIT_USAGE_ERROR: Final[int] = 4

DEFAULT_CONFIG_PATH: Final[Path] = Path("configs/client.yaml")

logger = logging.getLogger(__name__)


def describe_error(error: Exception) -> tuple[int, str]:
    """Map an exception to an exit code and a user-facing message.

    Args:
        error: Exception raised by the vault, generator or client

    Returns:
        (exit code, message)
    """
    if isinstance(error, PasswordMissingError):
        return EXIT_CREDENTIAL_ERROR, "No password provided. The API key cannot be unlocked."
    if isinstance(error, CredentialMissingError):
        return (
            EXIT_CREDENTIAL_ERROR,
            "API key not found. Run 'voice-vault setup' to enter your API key.",
        )
    if isinstance(error, AuthenticationFailedError):
        return EXIT_CREDENTIAL_ERROR, "Could not unlock the API key: wrong password or corrupted store."
    if isinstance(error, MalformedBlobError):
        return (
            EXIT_CREDENTIAL_ERROR,
            f"Stored API key is unreadable ({error}). "
            "Run 'voice-vault setup --force' to replace it.",
        )
    if isinstance(error, CryptoUnavailableError):
        return EXIT_CREDENTIAL_ERROR, f"Encryption is unavailable on this system: {error}"
    if isinstance(error, CredentialError):
        return EXIT_CREDENTIAL_ERROR, f"Credential error: {error}"
    if isinstance(error, RemoteCallRejectedError):
        return EXIT_REMOTE_ERROR, f"Failed to generate speech: {error}"
    if isinstance(error, RemoteCallExhaustedError):
        return EXIT_REMOTE_ERROR, f"Failed to generate speech: {error}. Try again later."
    if isinstance(error, SampleRateUnresolvableError):
        return EXIT_AUDIO_ERROR, "Could not determine sample rate from API response."
    if isinstance(error, AudioFormatError):
        return EXIT_AUDIO_ERROR, f"Failed to generate speech: {error}"
    if isinstance(error, ValidationError):
        return EXIT_USAGE_ERROR, f"Invalid configuration:\n{error}"
    if isinstance(error, yaml.YAMLError):
        return EXIT_USAGE_ERROR, f"Configuration file is not valid YAML: {error}"
    if isinstance(error, ValueError):
        return EXIT_USAGE_ERROR, str(error)
    return EXIT_REMOTE_ERROR, f"Failed to generate speech: {error or 'An unknown error occurred.'}"


class CLIClient:
    """Command handlers sharing one configuration and vault.

    Attributes:
        config: Validated client configuration
        vault: Credential vault over the configured JSON store
    """

    def __init__(
        self,
        config: ClientConfig,
        vault: CredentialVault | None = None,
        prompt: Callable[[str], str] | None = None,
    ) -> None:
        """Initialize CLI client.

        Args:
            config: Client configuration
            vault: Optional vault (defaults to a JsonFileStore at config.vault.path)
            prompt: Hidden-input prompt function (defaults to getpass.getpass)
        """
        self.config = config
        self.prompt = prompt or getpass.getpass
        if vault is None:
            cipher = CredentialCipher(iterations=config.vault.kdf_iterations)
            vault = CredentialVault(
                JsonFileStore(config.vault.path), cipher, config.vault.storage_key
            )
        self.vault = vault

    def read_password(self) -> str:
        """Get the vault password from the environment or a prompt."""
        password = os.getenv(self.config.vault.password_env)
        if password:
            return password
        return self.prompt("Vault password: ")

    def setup(self, force: bool = False) -> int:
        """Store the API key encrypted, prompting for it when absent.

        With force, an unreadable store is discarded and rewritten.
        """
        unreadable = False
        try:
            stored = self.vault.has_credential()
        except MalformedBlobError:
            if not force:
                raise
            stored, unreadable = False, True

        if stored and not force:
            print("An API key is already stored. Use --force to replace it.")
            return EXIT_OK

        api_key = self.prompt("Please enter your Gemini API key: ").strip()
        if not api_key:
            print("No API key provided. Voice generation will not work.", file=sys.stderr)
            return EXIT_CREDENTIAL_ERROR

        password = self.read_password()
        if unreadable:
            logger.warning("Discarding unreadable credential store")
            self.vault.store.clear()
        self.vault.save(api_key, password)
        log_event("credential_saved", {"storage_key": self.vault.storage_key, "replaced": stored})
        print("API key saved successfully!")
        return EXIT_OK

    def forget(self) -> int:
        """Delete the stored API key."""
        try:
            self.vault.clear()
        except MalformedBlobError:
            logger.warning("Discarding unreadable credential store")
            self.vault.store.clear()
        log_event("credential_cleared", {"storage_key": self.vault.storage_key})
        print("API key removed.")
        return EXIT_OK

    async def say(
        self, text: str, voice: str | None, out_path: Path, mock: bool = False
    ) -> SpeechResult:
        """Generate speech and write it to out_path."""
        if mock:
            client: MockSpeechClient | GeminiTTSClient = MockSpeechClient()
        else:
            password = self.read_password()
            client = GeminiTTSClient(
                self.config.api,
                self.config.retry,
                api_key_provider=lambda: self.vault.load(password),
            )

        async with client:
            generator = SpeechGenerator(client, self.config.voice, model=self.config.api.model)
            result = await generator.generate(text, voice)

        out_path.write_bytes(result.wav)
        header = read_wav_header(result.wav)
        log_event(
            "speech_written",
            {"voice": result.voice, "duration_s": header.duration_s, "path": str(out_path)},
        )
        print(
            f"Speech generated successfully using voice: {result.voice}! "
            f"{header.duration_s:.2f}s @ {header.sample_rate} Hz -> {out_path}"
        )
        return result


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="voice-vault",
        description="Generate speech with an API key stored under password-based encryption",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=DEFAULT_CONFIG_PATH,
        help=f"Path to client.yaml (default: {DEFAULT_CONFIG_PATH})",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    setup_parser = subparsers.add_parser("setup", help="Store your API key encrypted")
    setup_parser.add_argument(
        "--force", action="store_true", help="Replace an already stored API key"
    )

    say_parser = subparsers.add_parser("say", help="Generate speech for TEXT")
    say_parser.add_argument("text", help="Text to speak")
    say_parser.add_argument("--voice", default=None, help="Prebuilt voice name")
    say_parser.add_argument(
        "--out", type=Path, default=Path("speech.wav"), help="Output WAV path (default: speech.wav)"
    )
    say_parser.add_argument(
        "--mock", action="store_true", help="Use the offline mock adapter (no API key needed)"
    )

    subparsers.add_parser("forget", help="Delete the stored API key")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI.

    Returns:
        Process exit code
    """
    args = build_parser().parse_args(argv)

    try:
        config = ClientConfig.from_yaml_with_defaults(args.config)
    except (yaml.YAMLError, ValueError) as e:
        code, message = describe_error(e)
        print(message, file=sys.stderr)
        return code
    level = "DEBUG" if args.verbose else config.logging.level
    setup_logging(level, json_format=config.logging.format == "json")

    client = CLIClient(config)
    try:
        if args.command == "setup":
            return client.setup(force=args.force)
        if args.command == "forget":
            return client.forget()
        asyncio.run(client.say(args.text, args.voice, args.out, mock=args.mock))
        return EXIT_OK
    except KeyboardInterrupt:
        print("\nExiting...")
        return EXIT_OK
    except Exception as e:
        code, message = describe_error(e)
        logger.error("Command failed", extra={"command": args.command, "error": repr(e)})
        print(message, file=sys.stderr)
        return code


if __name__ == "__main__":
    sys.exit(main())
