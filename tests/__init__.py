"""Test package. Pins settings before any cleantask module reads the environment."""

import os

os.environ["APP_ENV"] = "dev"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret-for-unit-tests"
os.environ["JWT_ALGORITHM"] = "HS256"
os.environ["JWT_EXPIRE_MINUTES"] = "1440"
os.environ["BCRYPT_ROUNDS"] = "10"
os.environ.setdefault("LOG_LEVEL", "WARNING")
