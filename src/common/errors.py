"""Exception hierarchy for the credential vault, audio framing and speech client.

Callers branch on these types: a missing credential, a failed decryption and
an exhausted remote call each need a different message for the user.
"""


class VoiceVaultError(Exception):
    """Base exception for all voice-vault errors."""

    pass


class CredentialError(VoiceVaultError):
    """Base exception for credential storage and encryption errors."""

    pass


class CredentialMissingError(CredentialError):
    """Raised when no encrypted credential is present in the store."""

    pass


class PasswordMissingError(CredentialMissingError):
    """Raised when an empty password is supplied for encryption or decryption."""

    pass


class MalformedBlobError(CredentialError):
    """Raised when a stored blob or the store holding it cannot be decoded."""

    pass


class AuthenticationFailedError(CredentialError):
    """Raised when the AEAD tag does not verify.

    Wrong password, truncated ciphertext and tampering are reported the same
    way, so callers cannot use this as a decryption oracle.
    """

    pass


class CryptoUnavailableError(CredentialError):
    """Raised when the random source or cipher primitives cannot be invoked."""

    pass


class AudioFormatError(VoiceVaultError):
    """Base exception for remote audio payload errors."""

    pass


class SampleRateUnresolvableError(AudioFormatError):
    """Raised when the audio mime type carries no parsable sample rate."""

    pass


class UnsupportedAudioFormatError(AudioFormatError):
    """Raised when the response audio is missing or not 16-bit linear PCM."""

    pass


class RemoteCallError(VoiceVaultError):
    """Base exception for speech service call failures."""

    pass


class RemoteCallExhaustedError(RemoteCallError):
    """Raised when every retry attempt failed with a retryable error."""

    def __init__(self, attempts: int, last_error: str | None = None) -> None:
        self.attempts = attempts
        self.last_error = last_error
        message = f"API call failed after {attempts} attempts"
        if last_error:
            message = f"{message}: {last_error}"
        super().__init__(message)


class RemoteCallRejectedError(RemoteCallError):
    """Raised on a non-retryable HTTP status (4xx other than 429)."""

    def __init__(self, status: int, message: str) -> None:
        self.status = status
        self.message = message
        super().__init__(f"API Error: {status} - {message}")
