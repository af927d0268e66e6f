"""
SQLAlchemy models. Import here so init_db and the app can use them.
"""
from question_checker.models.api_key import GeminiApiKey

__all__ = ["GeminiApiKey"]
