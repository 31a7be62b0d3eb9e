"""Clinic accounting core: auth records, subscriptions, form versions and entries."""

__version__ = "0.1.0"