class ConfigurationError(ValueError):
    """Raised when a simulation config cannot produce a meaningful run."""
