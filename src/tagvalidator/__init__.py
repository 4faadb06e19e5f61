"""TagValidator: structural tag-balance checking for HTML/XML-like markup."""

__version__ = "0.4.0"
