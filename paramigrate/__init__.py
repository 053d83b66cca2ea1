"""paramigrate - atomic migration of wallet-provider integrations to the Para SDK."""

__version__ = "0.1.0"
