"""Exception types raised by md2pptx."""


class ConfigurationError(Exception):
    """Raised for an unknown template or layout, or invalid conversion options."""

    pass
