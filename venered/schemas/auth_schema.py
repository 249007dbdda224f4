from pydantic import BaseModel, ConfigDict
from typing import Optional

class AuthContext(BaseModel):
    """Identity of the caller, passed explicitly into every service"""
    model_config = ConfigDict(frozen=True)
    
    user_id: str
    access_token: str
    email: Optional[str] = None
    role: Optional[str] = None
