import os
from dotenv import load_dotenv

load_dotenv()

def _fix_db_url(url):
    """Fix common DATABASE_URL issues for SQLAlchemy compatibility."""
    if not url:
        return 'sqlite:///app.db'
    # Heroku/Render use postgres:// but SQLAlchemy requires postgresql://
    if url.startswith('postgres://'):
        url = url.replace('postgres://', 'postgresql://', 1)
    return url

class Config:
    SQLALCHEMY_DATABASE_URI = _fix_db_url(os.environ.get('DATABASE_URL', ''))
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    JWT_SECRET = os.environ.get('JWT_SECRET', 'dev-secret-change-me')
    JWT_EXPIRES_IN = int(os.environ.get('JWT_EXPIRES_IN', str(7 * 24 * 3600)))

    # Derived article fields
    WORDS_PER_MINUTE = 200
    EXCERPT_LENGTH = 160

    # Listing limits
    DEFAULT_PAGE_SIZE = 10
    MAX_PAGE_SIZE = 50
    SEARCH_LIMIT = 20
    TOP_KEYWORDS = 30
    MAX_KEYWORDS = 5
    MAX_LINKS = 10

    # Uploads
    UPLOAD_FOLDER = os.environ.get(
        'UPLOAD_FOLDER',
        os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'uploads'),
    )
    MAX_CONTENT_LENGTH = 5 * 1024 * 1024
    ALLOWED_IMAGE_EXTENSIONS = {'png', 'jpg', 'jpeg', 'gif', 'webp'}

    # Admin seed
    ADMIN_EMAIL = os.environ.get('ADMIN_EMAIL', 'admin@blog.com')
    ADMIN_PASSWORD = os.environ.get('ADMIN_PASSWORD', 'change_this_immediately')
    ADMIN_NAME = os.environ.get('ADMIN_NAME', 'System Admin')

class DevConfig(Config):
    DEBUG = True

class ProdConfig(Config):
    DEBUG = False

class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    JWT_SECRET = 'test-secret'
