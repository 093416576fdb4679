"""
Database base configuration
"""
from sqlalchemy.orm import declarative_base

# Create declarative base for SQLAlchemy models
Base = declarative_base()


# Import all models here to ensure they are registered with SQLAlchemy
def import_models():
    """Import all models to register them with SQLAlchemy"""
    from cloudstage.models import app_user  # noqa: F401
    from cloudstage.models import artist  # noqa: F401
    from cloudstage.models import event  # noqa: F401
    from cloudstage.models import follower  # noqa: F401
    from cloudstage.models import reconciliation_entry  # noqa: F401
    from cloudstage.models import ticket  # noqa: F401
