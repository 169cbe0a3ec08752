"""QA harness for the Halo Powered marketing site."""

__version__ = "0.1.0"
