"""Value types shared by tools, the prompt builder and the tool system."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional


@dataclass
class PromptSection:
    """One tool's contribution to the system prompt."""

    id: str
    title: str
    content: str
    order: int = 0


@dataclass(frozen=True)
class ToolResult:
    """Outcome of one successfully validated and handled block."""

    tool_id: str
    type: str
    data: Any
    timestamp: datetime = field(default_factory=datetime.now)
    confidence: Optional[float] = None
    metadata: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        data = self.data
        if hasattr(data, "model_dump"):
            data = data.model_dump()
        return {
            "tool_id": self.tool_id,
            "type": self.type,
            "data": data,
            "timestamp": self.timestamp.isoformat(),
            "confidence": self.confidence,
            "metadata": self.metadata,
        }
