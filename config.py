import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.path.join(ROOT_PATH, "env.yaml")

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file) or dict()
else:
    data = dict()


class ApplicationConfig:
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./rewards.db")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")
    JWT_SECRET = data.get("JWT_SECRET", "dev-secret-key-change-in-production")
    ADMIN_API_KEY = data.get("ADMIN_API_KEY", "test-admin-key-12345")

    # Platform superadmin allowlist, independent of workspace memberships
    PLATFORM_SUPERADMIN_EMAILS = data.get("PLATFORM_SUPERADMIN_EMAILS", [])
    PLATFORM_SUPERADMIN_AUTH_IDS = data.get("PLATFORM_SUPERADMIN_AUTH_IDS", [])

    REWARD_PROVIDER_BASE_URL = data.get("REWARD_PROVIDER_BASE_URL", "")
    REWARD_PROVIDER_API_KEY = data.get("REWARD_PROVIDER_API_KEY", "")
    REWARD_PROVIDER_TIMEOUT_SECONDS = float(data.get("REWARD_PROVIDER_TIMEOUT_SECONDS", 10))

    INVITE_CODE_TTL_DAYS = int(data.get("INVITE_CODE_TTL_DAYS", 7))
    INVITE_CODE_LENGTH = int(data.get("INVITE_CODE_LENGTH", 8))
    CAS_MAX_RETRIES = int(data.get("CAS_MAX_RETRIES", 1))

    REWARD_STALE_AFTER_MINUTES = int(data.get("REWARD_STALE_AFTER_MINUTES", 30))
    REWARD_RECONCILE_MAX_ATTEMPTS = int(data.get("REWARD_RECONCILE_MAX_ATTEMPTS", 3))
    REWARD_SWEEP_BATCH_SIZE = int(data.get("REWARD_SWEEP_BATCH_SIZE", 100))
    WEBHOOK_SIGNATURE_HEADER = data.get("WEBHOOK_SIGNATURE_HEADER", "X-Reward-Signature")
