"""Schema bootstrap and seed data (default admin, settings row, categories)."""
import logging

from pos_app.database import create_schema
from pos_app.models import AdminUser, Category
from pos_app.services.settings_service import get_settings

logger = logging.getLogger(__name__)


def seed_defaults(session, admin_email, admin_password, categories):
    """
    Insert the rows a fresh install needs. Safe to run repeatedly.

    Returns:
        dict with how many admins/categories were created
    """
    created_admin = 0
    if session.query(AdminUser).first() is None:
        admin = AdminUser(email=admin_email)
        admin.set_password(admin_password)
        session.add(admin)
        created_admin = 1

    existing = {name for (name,) in session.query(Category.name).all()}
    created_categories = 0
    for raw_name in categories:
        name = raw_name.strip()
        if name and name not in existing:
            session.add(Category(name=name))
            existing.add(name)
            created_categories += 1

    session.commit()
    get_settings(session)

    if created_admin or created_categories:
        logger.info(f"Seeded {created_admin} admin(s) and {created_categories} categories")
    return {'admins': created_admin, 'categories': created_categories}


def initialize_database(app, session):
    """Create tables and seed defaults from app config."""
    create_schema()
    return seed_defaults(
        session,
        app.config['DEFAULT_ADMIN_EMAIL'],
        app.config['DEFAULT_ADMIN_PASSWORD'],
        app.config.get('DEFAULT_CATEGORIES', [])
    )
