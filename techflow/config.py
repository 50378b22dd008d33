import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./techflow.db")

ENVIRONMENT = os.getenv("ENVIRONMENT", "development").lower()

# Security - CRITICAL: No default secret key in production
SECRET_KEY = os.getenv("SECRET_KEY")
if not SECRET_KEY:
    import warnings

    warnings.warn(
        "SECRET_KEY not set! Using insecure default - DO NOT USE IN PRODUCTION",
        RuntimeWarning,
        stacklevel=2,
    )
    SECRET_KEY = "INSECURE-DEV-KEY-CHANGE-IN-PRODUCTION"  # noqa: S105 - Dev fallback only

JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "1440"))  # 1 day

# Initial admin account, created on startup when the users table is empty
ADMIN_EMAIL = os.getenv("ADMIN_EMAIL")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD")
ADMIN_NAME = os.getenv("ADMIN_NAME", "Administrator")

# Admin UI origins
ALLOWED_ORIGINS = os.getenv(
    "ALLOWED_ORIGINS",
    "http://localhost:5173,http://localhost:3000",
).split(",")

# Attachment storage: "local" keeps files under UPLOAD_DIR, "r2" uses Cloudflare R2
STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "local").lower()
UPLOAD_DIR = os.getenv("UPLOAD_DIR", str(Path(__file__).resolve().parent.parent / "uploads"))
MAX_UPLOAD_MB = int(os.getenv("MAX_UPLOAD_MB", "10"))

# Cloudflare R2 Configuration
R2_ACCOUNT_ID = os.getenv("R2_ACCOUNT_ID")
R2_ACCESS_KEY_ID = os.getenv("R2_ACCESS_KEY_ID")
R2_SECRET_ACCESS_KEY = os.getenv("R2_SECRET_ACCESS_KEY")
R2_BUCKET_NAME = os.getenv("R2_BUCKET_NAME", "techflow")

# Invoicing defaults
DEFAULT_CURRENCY = os.getenv("DEFAULT_CURRENCY", "ETB")
DEFAULT_TAX_RATE = float(os.getenv("DEFAULT_TAX_RATE", "15"))  # VAT percent
INVOICE_DUE_DAYS = int(os.getenv("INVOICE_DUE_DAYS", "15"))
BUSINESS_NAME = os.getenv("BUSINESS_NAME", "TechFlow Services")

# Redis cache for analytics rollups (disabled unless explicitly enabled)
CACHE_ENABLED = os.getenv("CACHE_ENABLED", "false").lower() == "true"
ANALYTICS_CACHE_TTL = int(os.getenv("ANALYTICS_CACHE_TTL", "300"))

# Dashboard
RECENT_ORDERS_DAYS = int(os.getenv("RECENT_ORDERS_DAYS", "7"))
