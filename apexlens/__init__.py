"""apexlens - structured diagnostics for Salesforce debug logs."""

__version__ = "0.1.0"
