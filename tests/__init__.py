import os

os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["ENVIRONMENT"] = "test"
os.environ["LOG_REQUESTS"] = "false"
os.environ["PASSWORD_PBKDF2_ROUNDS"] = "1000"
os.environ["SALE_RETRY_BACKOFF_SECONDS"] = "0"
os.environ["RATE_LIMIT_ENABLED"] = "false"
