from pydantic_settings import BaseSettings
from typing import List, Optional, Literal
from functools import lru_cache

class Settings(BaseSettings):
    # Environment
    ENVIRONMENT: Literal["development", "testing", "production"] = "development"
    
    # Project
    PROJECT_NAME: str = "Venered"
    VERSION: str = "1.0.0"
    DEBUG: bool = False
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    
    # Supabase
    SUPABASE_URL: str = "http://localhost:54321"
    SUPABASE_ANON_KEY: str = "anon-key-here"
    SUPABASE_JWT_SECRET: str = "your-supabase-jwt-secret-here"
    
    # JWT (tokens are issued by Supabase auth, only verified here)
    JWT_ALGORITHM: str = "HS256"
    JWT_AUDIENCE: str = "authenticated"
    
    # Test JWT secret (different from production)
    TEST_JWT_SECRET: str = "test-secret-key"
    
    # Security
    CORS_ORIGINS: List[str] = ["*"]
    API_V1_PREFIX: str = "/api/v1"
    
    # Rate limiting
    RATE_LIMIT_PER_MINUTE: int = 60
    
    # Image upload (ImgBB)
    IMGBB_API_KEY: Optional[str] = None
    IMGBB_UPLOAD_URL: str = "https://api.imgbb.com/1/upload"
    MAX_UPLOAD_SIZE: int = 10 * 1024 * 1024  # 10MB
    
    # Realtime
    NOTIFICATION_FEED_LIMIT: int = 50
    REALTIME_DEDUP_WINDOW: int = 256
    NOTIFICATION_CUES_ENABLED: bool = True
    
    # Testing
    TESTING: bool = False
    
    @property
    def is_testing(self) -> bool:
        return self.TESTING or self.ENVIRONMENT == "testing"
    
    @property
    def jwt_secret(self) -> str:
        """Get appropriate JWT secret based on environment"""
        if self.is_testing:
            return self.TEST_JWT_SECRET
        return self.SUPABASE_JWT_SECRET
    
    class Config:
        env_file = ".env"
        case_sensitive = True

@lru_cache()
def get_settings() -> Settings:
    return Settings()

settings = get_settings()
