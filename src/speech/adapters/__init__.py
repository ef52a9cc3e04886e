"""Speech service adapters."""
