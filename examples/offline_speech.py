#!/usr/bin/env python3
"""Offline walkthrough of the vault and the speech pipeline.

Demonstrates:
- Encrypting an API key under a password and reading it back
- How a wrong password is reported
- Generating a WAV from the mock adapter (no network, no real key)

Usage:
    python examples/offline_speech.py
"""

import asyncio
import base64
from pathlib import Path

from common.errors import AuthenticationFailedError
from speech.adapters.adapter_mock import MockSpeechClient
from speech.audio.framing import read_wav_header
from speech.generator import SpeechGenerator
from vault.cipher import CredentialCipher
from vault.store import CredentialVault, MemoryStore


async def main() -> None:
    """Run the walkthrough."""
    print("Credential Vault\n" + "=" * 50)
    vault = CredentialVault(MemoryStore(), CredentialCipher())
    vault.save("sk-test-123", "Encc1234")
    blob = vault.store.get("apiKey") or ""
    print(f"   Stored blob: {blob[:32]}... ({len(base64.b64decode(blob))} bytes)")
    print(f"   Decrypted:   {vault.load('Encc1234')}")

    try:
        vault.load("not-the-password")
    except AuthenticationFailedError as e:
        print(f"   Wrong password -> {type(e).__name__}")

    print("\nSpeech (mock adapter)\n" + "=" * 50)
    generator = SpeechGenerator(MockSpeechClient())
    result = await generator.generate("Hello from the offline example")
    header = read_wav_header(result.wav)
    out = Path("offline_speech.wav")
    out.write_bytes(result.wav)
    print(f"   {header.sample_rate} Hz, {header.duration_s:.2f}s, {len(result.wav)} bytes -> {out}")


if __name__ == "__main__":
    asyncio.run(main())
