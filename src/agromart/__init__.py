"""AgroMart checkout: payment session request and hosted payment sheet flow."""

__version__ = "0.1.0"
