import os
from dotenv import load_dotenv

load_dotenv()

class Config:
    SECRET_KEY = os.environ.get('SESSION_SECRET') or os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'
    GOOGLE_APPLICATION_CREDENTIALS = os.environ.get('GOOGLE_APPLICATION_CREDENTIALS', './firebase-service-account.json')
    FIREBASE_PROJECT_ID = os.environ.get('FIREBASE_PROJECT_ID', '')
    CORS_ALLOWED_ORIGINS = os.environ.get('CORS_ALLOWED_ORIGINS', '')
    SOCKETIO_ASYNC_MODE = os.environ.get('SOCKETIO_ASYNC_MODE', 'threading')

    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO').upper()
    FANOUT_MAX_WORKERS = int(os.environ.get('FANOUT_MAX_WORKERS', 8))
    CLASSROOM_PAGE_SIZE = int(os.environ.get('CLASSROOM_PAGE_SIZE', 30))
