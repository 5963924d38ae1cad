"""Request-scoped context handed to every tool invocation."""

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, Optional

from ..auth.session import SessionProvider


@dataclass
class TurnContext:
    """Dependencies for one agent turn.

    Tools resolve the principal from ``session`` on every call; nothing in
    here is trusted as an owner id.
    """

    session: Optional[SessionProvider]
    timezone: str = "UTC"
    reference_date: Optional[date] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
