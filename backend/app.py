import os
import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv

from dojo_routes import dojo_router

# Load environment variables
load_dotenv()

# Set up logging - disable uvicorn access logs
logging.basicConfig(
    level=os.getenv("DOJO_LOG_LEVEL", "INFO").upper(),
    format='%(asctime)s - %(message)s',
    datefmt='%H:%M:%S'
)
logger = logging.getLogger(__name__)

# Disable uvicorn access logs
logging.getLogger("uvicorn.access").disabled = True

# FastAPI app setup
app = FastAPI(title="Tic-Tac-Dojo Engine")

# Enable CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        origin.strip()
        for origin in os.getenv("DOJO_CORS_ORIGINS", "http://localhost:5173,http://localhost").split(",")
        if origin.strip()
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
def health():
    """Liveness check"""
    return {"status": "ok"}


# Register the dojo router with FastAPI
app.include_router(dojo_router)

logger.info("✅ Tic-Tac-Dojo engine endpoints registered")
