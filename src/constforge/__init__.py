"""constforge — unify scattered literals into a layered constant catalog."""

__version__ = "0.1.0"
