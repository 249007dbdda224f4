from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, Optional, Tuple
from enum import Enum

class ChangeEventType(str, Enum):
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"

class ChangeEvent(BaseModel):
    """A single row change delivered by the realtime change feed"""
    model_config = ConfigDict(frozen=True)
    
    event_type: ChangeEventType
    table: Optional[str] = None
    new: Dict[str, Any] = Field(default_factory=dict)
    old: Dict[str, Any] = Field(default_factory=dict)
    commit_timestamp: Optional[str] = None
    
    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "ChangeEvent":
        """Normalise the payload shapes the realtime client hands to callbacks.
        
        Accepts the wire shape (``{"data": {"type", "record", "old_record", ...}}``),
        the unwrapped ``data`` dict, and the ``eventType``/``new``/``old`` shape.
        """
        data = payload.get("data", payload)
        if not isinstance(data, dict):
            raise ValueError("Change payload has no data")
        
        event_type = data.get("eventType") or data.get("type")
        if not event_type:
            raise ValueError("Change payload has no event type")
        
        new = data.get("new", data.get("record")) or {}
        old = data.get("old", data.get("old_record")) or {}
        
        return cls(
            event_type=ChangeEventType(str(event_type).upper()),
            table=data.get("table"),
            new=new,
            old=old,
            commit_timestamp=data.get("commit_timestamp")
        )
    
    @property
    def row(self) -> Dict[str, Any]:
        """The most complete image of the changed row"""
        return self.new or self.old
    
    @property
    def row_id(self) -> Optional[Any]:
        return self.new.get("id", self.old.get("id"))
    
    @property
    def event_id(self) -> Optional[Tuple[str, Any, str]]:
        """Identifier used to drop repeated deliveries; None when not derivable"""
        if self.row_id is None or not self.commit_timestamp:
            return None
        return (self.event_type.value, self.row_id, self.commit_timestamp)
