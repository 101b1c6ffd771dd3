"""payctl - build and deploy applications to Payara Server instances."""

__version__ = "0.4.0"
