"""Database models — re-exports all models.

Import from here:  from crm.models import User, Offer, ...
Or from submodules: from crm.models.offers import Offer
"""

from .base import Base  # noqa: F401

# Auth & Users
from .auth import User  # noqa: F401

# CRM records
from .contractors import Contractor  # noqa: F401
from .offers import Offer  # noqa: F401
from .tasks import Task  # noqa: F401

# Correspondence & support
from .emails import Email  # noqa: F401
from .support import SupportTicket  # noqa: F401

# Notifications
from .notifications import Notification  # noqa: F401
