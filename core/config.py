from datetime import timedelta
import os
from dotenv import load_dotenv

load_dotenv()
class Config:
    SQLALCHEMY_DATABASE_URI = os.environ.get("DATABASE_URL")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SECRET_KEY = os.environ.get("SECRET_KEY")
    JWT_SECRET_KEY = os.environ.get("JWT_SECRET_KEY") or os.environ.get("SECRET_KEY")
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=24)
    # EventSource cannot set headers, so the order stream reads ?jwt=
    JWT_TOKEN_LOCATION = ["headers", "query_string"]

    MAIL_SERVER = os.environ.get("MAIL_SERVER", "smtp.gmail.com")
    MAIL_PORT = int(os.environ.get("MAIL_PORT", 587))
    MAIL_USE_TLS = True
    MAIL_USERNAME = os.getenv("USERNAME_FOR_EMAIL")
    MAIL_PASSWORD = os.getenv("PASSWORD_FOR_EMAIL")
    MAIL_DEFAULT_SENDER = os.getenv("USERNAME_FOR_EMAIL")

    CLOUDINARY_CLOUD_NAME = os.environ.get("CLOUDINARY_CLOUD_NAME")
    CLOUDINARY_API_KEY = os.environ.get("CLOUDINARY_API_KEY")
    CLOUDINARY_API_SECRET = os.environ.get("CLOUDINARY_API_SECRET")
    CLOUDINARY_FOLDER = os.environ.get("CLOUDINARY_FOLDER", "products")

    ADMIN_EMAIL = os.environ.get("ADMIN_EMAIL")
    ADMIN_PASSWORD = os.environ.get("ADMIN_PASSWORD")

    CURRENCY_SYMBOL = os.environ.get("CURRENCY_SYMBOL", "₹")
    ADMIN_PAGE_SIZE = int(os.environ.get("ADMIN_PAGE_SIZE", 10))
    ORDER_STREAM_KEEPALIVE = 15

    SWAGGER = {"title": "Sparkle Fireworks API", "uiversion": 3}

    # Backend credentials without which the app refuses to start
    REQUIRED_SETTINGS = ("SQLALCHEMY_DATABASE_URI", "SECRET_KEY")


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SECRET_KEY = "test-secret-key"
    JWT_SECRET_KEY = "test-jwt-secret-key-with-enough-length"
    MAIL_SUPPRESS_SEND = True
    MAIL_DEFAULT_SENDER = "orders@sparkle.test"
    CLOUDINARY_CLOUD_NAME = "demo"
    CLOUDINARY_API_KEY = "key"
    CLOUDINARY_API_SECRET = "secret"
    ADMIN_EMAIL = "admin@sparkle.test"
    ADMIN_PASSWORD = "AdminPass123"
    BCRYPT_LOG_ROUNDS = 4
