"""brew-services: start and stop formulae via launchctl."""

__version__ = "0.1.0"
