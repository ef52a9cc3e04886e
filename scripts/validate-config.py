#!/usr/bin/env python3
"""Validate the voice-vault client configuration file.

Loads client.yaml through the Pydantic models (environment overrides
included) and reports every validation error with the offending field.

Exit codes:
    0: Configuration valid
    1: Configuration validation failed
    2: File not found or YAML parse error

Usage:
    ./scripts/validate-config.py
    ./scripts/validate-config.py --config configs/client.yaml --verbose
"""

import argparse
import sys
from pathlib import Path

import yaml  # type: ignore[import-untyped]
from pydantic import ValidationError

from speech.config import ClientConfig


def format_validation_errors(e: ValidationError) -> str:
    """Format Pydantic validation errors one field per block.

    Args:
        e: Pydantic ValidationError

    Returns:
        Formatted error message with resolution hints
    """
    errors = []
    for error in e.errors():
        loc = ".".join(str(x) for x in error["loc"]) or "(root)"
        msg = error["msg"]
        errors.append(f"      Field: {loc}")
        errors.append(f"      Error: {msg}")

        if "greater than" in msg.lower() or "less than" in msg.lower():
            errors.append("      Resolution: Check the valid range in configs/client.yaml comments")
        elif "default_voice" in msg:
            errors.append("      Resolution: Add the default voice to voice.voices")
        errors.append("")

    return "\n".join(errors)


def validate_client_config(path: Path, verbose: bool = False) -> int:
    """Validate client.yaml.

    Args:
        path: Path to client.yaml
        verbose: Show the loaded configuration on success

    Returns:
        Exit code
    """
    try:
        config = ClientConfig.from_yaml(path)
    except FileNotFoundError:
        print(f"❌ {path}: File not found")
        return 2
    except yaml.YAMLError as e:
        print(f"❌ {path}: YAML parse error")
        print(f"   Error: {e}")
        return 2
    except ValidationError as e:
        print(f"❌ {path}: Invalid client configuration")
        print("\n   Validation Errors:")
        print(format_validation_errors(e))
        return 1
    except ValueError as e:
        print(f"❌ {path}: {e}")
        return 1

    print(f"✅ {path}: Valid client configuration")
    if verbose:
        print(f"   - API: {config.api.base_url} ({config.api.model})")
        print(
            f"   - Retry: {config.retry.max_retries} attempts, "
            f"{config.retry.initial_delay_ms}ms x{config.retry.backoff_factor}"
        )
        print(f"   - Voice: {config.voice.default_voice} (of {len(config.voice.voices)})")
        print(f"   - Vault: {config.vault.path} [{config.vault.storage_key}]")
        print(f"   - KDF iterations: {config.vault.kdf_iterations}")
        print(f"   - Log Level: {config.logging.level} ({config.logging.format})")
    return 0


def main() -> int:
    """Main entry point for config validation tool."""
    parser = argparse.ArgumentParser(description="Validate voice-vault client configuration")
    parser.add_argument(
        "--config",
        type=Path,
        default=Path("configs/client.yaml"),
        help="Path to client.yaml (default: configs/client.yaml)",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Show configuration details on success"
    )
    args = parser.parse_args()
    return validate_client_config(args.config, verbose=args.verbose)


if __name__ == "__main__":
    sys.exit(main())
