from sqlalchemy.orm import declarative_base

# Общий Base для всех моделей
Base = declarative_base()


def import_all_models():
    """Регистрирует все модели в Base.metadata перед create_all."""
    from models import gift, like, match, message, notification, photo, user  # noqa: F401
