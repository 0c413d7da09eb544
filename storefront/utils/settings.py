# storefront/utils/settings.py
import os
from dotenv import load_dotenv

load_dotenv()

API_BASE_URL = os.getenv("API_BASE_URL", "https://seashell-app-4gkvz.ondigitalocean.app/api")
API_TIMEOUT_SECONDS = float(os.getenv("API_TIMEOUT_SECONDS", 10))
GOOGLE_EXCHANGE_TIMEOUT_SECONDS = float(os.getenv("GOOGLE_EXCHANGE_TIMEOUT_SECONDS", 15))

REDIS_URL = os.getenv("REDIS_URL", "redis://redis:6379/0")
CELERY_BROKER_URL = os.getenv("CELERY_BROKER_URL", "redis://redis:6379/1")
CELERY_RESULT_BACKEND = os.getenv("CELERY_RESULT_BACKEND", "redis://redis:6379/2")

# pusty -> origin brany z requestu
STOREFRONT_ORIGIN = os.getenv("STOREFRONT_ORIGIN", "")
CLIENT_COOKIE_NAME = os.getenv("CLIENT_COOKIE_NAME", "sf_client")

SUBMIT_LOCK_TTL_SECONDS = int(os.getenv("SUBMIT_LOCK_TTL_SECONDS", 30))
SESSION_IDLE_TTL_SECONDS = int(os.getenv("SESSION_IDLE_TTL_SECONDS", 30 * 60))
PENDING_PAYMENT_GRACE_SECONDS = int(os.getenv("PENDING_PAYMENT_GRACE_SECONDS", 60 * 60))
STORAGE_EVENTS_ENABLED = os.getenv("STORAGE_EVENTS_ENABLED", "true").lower() == "true"

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
