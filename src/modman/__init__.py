"""modman — dotfiles module manager."""

__version__ = "0.3.0"
