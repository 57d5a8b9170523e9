"""npub: release pipeline for npm packages."""

__version__ = "0.1.0"
