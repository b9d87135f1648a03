"""SIP message model, whole-message and stream parsers, and transaction and dialog keys."""

__version__ = "0.1.0"