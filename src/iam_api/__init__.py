"""IAM API: user, group and role management over a revision-tracked document store."""

__version__ = "0.1.0"

__all__ = ["__version__"]
