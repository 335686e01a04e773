"""Filter certificate scan CSV dumps by validity, organization and CA policy, with MySQL bulk loading."""

__version__ = "0.1.0"