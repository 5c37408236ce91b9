"""Ben Davis Automotive site backend: persona chat, dashboard, generated art."""

__version__ = "1.0.0"
