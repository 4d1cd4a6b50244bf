"""Account and script persistence service for generated hypnotherapy sessions."""

__version__ = "0.1.0"
