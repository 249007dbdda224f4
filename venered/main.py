from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from datetime import datetime
import logging
from venered.config import settings
from venered.api import admin, follow, live, messages, notifications, posts, profiles, uploads
from venered.websocket.manager import live_manager
from venered.utils.rate_limit import limiter
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events"""
    # Startup
    logger.info(f"Starting up ({settings.ENVIRONMENT}), backend at {settings.SUPABASE_URL}")
    
    if not settings.IMGBB_API_KEY:
        logger.warning("IMGBB_API_KEY is not set, image uploads are disabled")
    
    yield
    
    # Shutdown
    logger.info(
        f"Shutting down with {await live_manager.get_total_connections_count()} live sessions open"
    )

# Create FastAPI app
app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    description="Social network backend with live unread counters and notification feed",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan
)

# Add rate limiter
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
prefix = settings.API_V1_PREFIX
app.include_router(profiles.router, prefix=f"{prefix}/profiles", tags=["Profiles"])
app.include_router(posts.router, prefix=f"{prefix}/posts", tags=["Posts"])
app.include_router(follow.router, prefix=f"{prefix}/follow", tags=["Follow"])
app.include_router(messages.router, prefix=f"{prefix}/messages", tags=["Messages"])
app.include_router(notifications.router, prefix=f"{prefix}/notifications", tags=["Notifications"])
app.include_router(uploads.router, prefix=f"{prefix}/uploads", tags=["Uploads"])
app.include_router(admin.router, prefix=f"{prefix}/admin", tags=["Admin"])
app.include_router(live.router, prefix=f"{prefix}/live", tags=["Live"])

@app.get("/")
async def root():
    """Root endpoint with API information"""
    return {
        "message": "Welcome to Venered",
        "version": settings.VERSION,
        "docs": "/api/docs",
        "redoc": "/api/redoc"
    }

@app.get("/health")
@limiter.limit("10/minute")
async def health_check(request: Request):
    """Health check endpoint"""
    return {
        "status": "healthy",
        "connected_users": await live_manager.get_connected_users_count(),
        "live_sessions": await live_manager.get_total_connections_count(),
        "timestamp": datetime.now().isoformat()
    }

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "venered.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level="info"
    )
