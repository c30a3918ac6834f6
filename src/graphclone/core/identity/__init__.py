"""Call-scoped identity tracking."""

from graphclone.core.identity.models import IdentityMap

__all__ = ["IdentityMap"]
