"""Initialize the database and issue a results API key."""
import sys
from sqlalchemy.orm import Session
from splitlab.database import SessionLocal, engine, Base
from splitlab.models import User
from splitlab.middleware.auth import create_user_with_api_key, generate_api_key


def init_database(label: str = "initial-admin"):
    """Create tables and, on an empty database, one API-key user."""
    print("Creating database tables...")
    Base.metadata.create_all(bind=engine)

    db: Session = SessionLocal()

    try:
        # Check if user already exists
        existing_user = db.query(User).first()
        if existing_user:
            print("✓ Database already initialized")
            return

        api_key = generate_api_key()
        user = create_user_with_api_key(db, api_key, label=label)
        print(f"✓ Created user with ID: {user.id}")

        print("\n" + "="*50)
        print("✓ Database initialized successfully!")
        print("="*50)
        print(f"\nResults API Key: {api_key}")
        print("Save it now, only its hash is stored. Use it with curl:")
        print(f'  curl -H "x-api-key: {api_key}" http://localhost:8000/api/experiments/results')
        print("\n" + "="*50)

    except Exception as e:
        print(f"✗ Error initializing database: {e}")
        db.rollback()
        sys.exit(1)
    finally:
        db.close()


if __name__ == "__main__":
    init_database(*sys.argv[1:2])
