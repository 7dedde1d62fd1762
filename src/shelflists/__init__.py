"""Reading lists with ordered membership and ranked favorites."""

__version__ = "0.1.0"
