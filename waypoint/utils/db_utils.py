import logging
from waypoint.database.session import SessionLocal
from waypoint.database.store import DocumentStore
from waypoint.models import User
from waypoint.schemas import UserCreate
from waypoint.config.settings import settings
from waypoint.constants import Roles
from waypoint.utils import user_service

logger = logging.getLogger(__name__)

def create_default_admin():
    """
    Checks for an existing admin user and creates a default one if missing.
    Uses credentials from settings.
    """
    db = SessionLocal()
    try:
        store = DocumentStore(db)
        admin = store.find_one(User, User.role == Roles.ADMIN)
        if not admin:
            logger.info("Creating default admin account...")
            user_service.create_user(store, UserCreate(
                name=settings.ADMIN_NAME,
                username=settings.ADMIN_USERNAME,
                password=settings.ADMIN_PASSWORD,
                role=Roles.ADMIN,
            ))
            logger.info("Default admin user created")
        else:
            logger.info("Admin user already exists")
    finally:
        db.close()
