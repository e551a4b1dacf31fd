"""ProjectHub access core: roles, memberships, and capability enforcement."""

__version__ = "0.1.0"
