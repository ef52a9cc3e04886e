"""Common utilities and error types.

This package provides the codec helpers and the exception hierarchy shared by
the credential vault, the audio framer and the speech client.
"""

from common.codec import (
    base64_to_bytes,
    bytes_to_base64,
    bytes_to_text,
    concat_buffers,
    text_to_bytes,
)
from common.errors import (
    AudioFormatError,
    AuthenticationFailedError,
    CredentialError,
    CredentialMissingError,
    CryptoUnavailableError,
    MalformedBlobError,
    PasswordMissingError,
    RemoteCallError,
    RemoteCallExhaustedError,
    RemoteCallRejectedError,
    SampleRateUnresolvableError,
    UnsupportedAudioFormatError,
    VoiceVaultError,
)

__all__ = [
    "AudioFormatError",
    "AuthenticationFailedError",
    "CredentialError",
    "CredentialMissingError",
    "CryptoUnavailableError",
    "MalformedBlobError",
    "PasswordMissingError",
    "RemoteCallError",
    "RemoteCallExhaustedError",
    "RemoteCallRejectedError",
    "SampleRateUnresolvableError",
    "UnsupportedAudioFormatError",
    "VoiceVaultError",
    "base64_to_bytes",
    "bytes_to_base64",
    "bytes_to_text",
    "concat_buffers",
    "text_to_bytes",
]
