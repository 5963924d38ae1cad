"""Per-turn context: request-scoped dependencies and the context bundle assembler."""

from .assembler import ContextAssembler
from .models import TurnContext

__all__ = ["ContextAssembler", "TurnContext"]
