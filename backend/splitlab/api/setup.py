"""Setup endpoint for database initialization."""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from splitlab.database import SessionLocal, engine, Base
from splitlab.models import User
from splitlab.middleware.auth import create_user_with_api_key, generate_api_key, require_admin_key
from splitlab.middleware.logging import get_logger

router = APIRouter()
logger = get_logger()


@router.post("/setup/init-db", dependencies=[Depends(require_admin_key)])
def initialize_database():
    """
    Initialize database tables and issue the first results API key.

    Requires the x-admin-key header. Only issues a key while no user
    exists; the key is shown once and only its hash is stored.
    """
    db: Session = SessionLocal()

    try:
        # Create all tables
        Base.metadata.create_all(bind=engine)

        # Check if already initialized
        existing_user = db.query(User).first()
        if existing_user:
            return {
                "status": "already_initialized",
                "message": "Database already has data. Skipping initialization."
            }

        api_key = generate_api_key()
        user = create_user_with_api_key(db, api_key, label="initial-admin")
        logger.info("api_key_issued", user_id=str(user.id))

        return {
            "status": "success",
            "message": "Database initialized successfully",
            "user_id": str(user.id),
            "api_key": api_key,
            "note": "Save your API key! This is the only time it will be shown."
        }

    except Exception as e:
        db.rollback()
        logger.error("setup_failed", error=str(e))
        raise HTTPException(
            status_code=500,
            detail="Database initialization failed"
        )
    finally:
        db.close()
