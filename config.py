"""Configuration module for Flask application."""
import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

BASE_DIR = os.path.abspath(os.path.dirname(__file__))


class Config:
    """Base configuration class."""

    # Flask
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key-change-in-production')
    DEBUG = os.getenv('FLASK_DEBUG', '1') == '1'
    ENV = os.getenv('FLASK_ENV', 'development')

    # Database - Support multiple environment variable naming conventions
    # Priority: DATABASE_URL > DB_*
    DATABASE_URL = os.getenv('DATABASE_URL')

    if not DATABASE_URL:
        DB_HOST = os.getenv('DB_HOST', 'localhost')
        DB_PORT = os.getenv('DB_PORT', '5432')
        DB_NAME = os.getenv('DB_NAME', 'srivelavan_crackers')
        DB_USER = os.getenv('DB_USER', 'postgres')
        DB_PASSWORD = os.getenv('DB_PASSWORD') or os.getenv('DB_PASS', '')

        DATABASE_URL = (
            f"postgresql://{DB_USER}:{DB_PASSWORD}"
            f"@{DB_HOST}:{DB_PORT}/{DB_NAME}"
        )

    # SQLAlchemy
    SQLALCHEMY_DATABASE_URI = DATABASE_URL
    SQLALCHEMY_ECHO = os.getenv('SQLALCHEMY_ECHO', 'false').lower() == 'true'

    # Connection pool (checkout wait is bounded, never queue forever)
    DB_POOL_SIZE = int(os.getenv('DB_POOL_SIZE', '10'))
    DB_MAX_OVERFLOW = int(os.getenv('DB_MAX_OVERFLOW', '20'))
    DB_POOL_TIMEOUT = int(os.getenv('DB_POOL_TIMEOUT', '10'))  # seconds

    # Billing
    BILL_NUMBER_PREFIX = os.getenv('BILL_NUMBER_PREFIX', 'SV')
    BILL_NUMBER_RETRIES = int(os.getenv('BILL_NUMBER_RETRIES', '1'))
    DEFAULT_CUSTOMER_NAME = os.getenv('DEFAULT_CUSTOMER_NAME', 'Walk-in Customer')
    ALLOW_NEGATIVE_STOCK = os.getenv('ALLOW_NEGATIVE_STOCK', 'true').lower() == 'true'

    # Stock / dashboard
    LOW_STOCK_THRESHOLD = int(os.getenv('LOW_STOCK_THRESHOLD', '10'))
    DASHBOARD_RECENT_LIMIT = int(os.getenv('DASHBOARD_RECENT_LIMIT', '5'))

    # Business Information (for invoices)
    BUSINESS_NAME = os.getenv('BUSINESS_NAME', 'Sri Velavan Crackers')
    BUSINESS_ADDRESS = os.getenv(
        'BUSINESS_ADDRESS',
        'D.No: 12/417/3 Rathnapuri Nagar, Meenampatti, SIVAKASI - 626 123'
    )
    BUSINESS_PHONE = os.getenv('BUSINESS_PHONE', '80722 50499, 97874 21455')
    BUSINESS_WEBSITE = os.getenv('BUSINESS_WEBSITE', 'srivelavancrackers.com')

    # Static frontend and uploads
    FRONTEND_FOLDER = os.getenv('FRONTEND_FOLDER', os.path.join(BASE_DIR, 'public'))
    UPLOAD_FOLDER = os.getenv('UPLOAD_FOLDER', os.path.join(BASE_DIR, 'uploads'))
    MAX_UPLOAD_SIZE = int(os.getenv('MAX_UPLOAD_SIZE', 5 * 1024 * 1024))  # 5MB
    MAX_CONTENT_LENGTH = MAX_UPLOAD_SIZE + 1024 * 1024
    ALLOWED_EXTENSIONS = {'jpg', 'jpeg', 'png', 'gif', 'webp'}
    ALLOWED_MIME_TYPES = {
        'image/jpeg',
        'image/png',
        'image/gif',
        'image/webp'
    }

    # Seed data
    DEFAULT_ADMIN_EMAIL = os.getenv('DEFAULT_ADMIN_EMAIL', 'admin@srivelavancrackers.com')
    DEFAULT_ADMIN_PASSWORD = os.getenv('DEFAULT_ADMIN_PASSWORD', 'admin123')
    DEFAULT_CATEGORIES = [
        'Sparklers', 'Rockets', 'one sound crackers', 'flowerpots',
        'twinkling star', 'pencil crackers', 'children special fountains',
        'fountains and crackling', 'paper bomb', 'bijili crackers',
        'continuous crackers', 'fancy sky shots', 'night shots multicolour',
        'roll cap& colour matches', 'special gift box', 'Bombs',
        'Fountains', 'ground chakkars', 'fancy chakkars'
    ]
    INIT_DB_ON_STARTUP = os.getenv('INIT_DB_ON_STARTUP', 'true').lower() == 'true'


class TestConfig(Config):
    """Configuration used by the test suite (SQLite file database)."""

    TESTING = True
    DEBUG = False
    ENV = 'testing'
    SQLALCHEMY_DATABASE_URI = os.getenv('TEST_DATABASE_URL', 'sqlite:///' + os.path.join(BASE_DIR, 'test_pos.db'))
    SQLALCHEMY_ECHO = False
    DB_POOL_TIMEOUT = 30
    INIT_DB_ON_STARTUP = True
