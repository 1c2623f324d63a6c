"""
Vercel Serverless Function Entry Point

Exposes the FastAPI application as a Vercel serverless function.
All API routes are handled by this single entry point.
"""

import os
import sys
from pathlib import Path

# Ensure project root is in path for imports
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

# Set default to use PostgreSQL in production
if 'DATABASE_URL' in os.environ and 'USE_SQLITE' not in os.environ:
    os.environ['USE_SQLITE'] = '0'

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from mangum import Mangum

from backend.main import ALLOWED_ORIGINS, register_routes

# Create a lightweight app for serverless
app = FastAPI(
    title="Autoplanner API",
    description="Command-driven personal automation API",
    version="0.1.0",
)

# CORS for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS + [
        "https://*.vercel.app",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_routes(app)

# Mangum adapter for AWS Lambda/Vercel
handler = Mangum(app, lifespan="off")
