"""Account domain models. Services live in :mod:`.service`."""

from .models import Account, AccountCreateInput

__all__ = ["Account", "AccountCreateInput"]
