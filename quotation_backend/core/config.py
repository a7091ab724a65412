# quotation_backend/core/config.py
import os
from dotenv import load_dotenv

load_dotenv()

# -----------------------
# Database Config
# -----------------------
DB_TYPE = os.getenv("DB_TYPE", "sqlite").lower()

if DB_TYPE == "postgres":
    DATABASE_URL = os.getenv("DATABASE_URL")
    if not DATABASE_URL:
        raise ValueError("DATABASE_URL is required for Postgres setup")
elif DB_TYPE == "sqlite":
    DATABASE_URL = os.getenv("SQLITE_URL", "sqlite+aiosqlite:///./quotations.db")
else:
    raise ValueError(f"Unsupported DB_TYPE: {DB_TYPE}")

# -----------------------
# JWT Config
# -----------------------
JWT_SECRET = os.getenv("JWT_SECRET")
if not JWT_SECRET:
    raise ValueError("JWT_SECRET environment variable must be set")

JWT_ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "15"))
ADMIN_ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ADMIN_ACCESS_TOKEN_EXPIRE_MINUTES", "60"))

# -----------------------
# Quotation Config
# -----------------------
QUOTATION_NUMBER_PREFIX = os.getenv("QUOTATION_NUMBER_PREFIX", "QUO")
QUOTATION_VALIDITY_DAYS = int(os.getenv("QUOTATION_VALIDITY_DAYS", "30"))
if QUOTATION_VALIDITY_DAYS <= 0:
    raise ValueError("QUOTATION_VALIDITY_DAYS must be a positive number of days")

DEFAULT_CURRENCY = os.getenv("DEFAULT_CURRENCY", "USD").upper()

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
