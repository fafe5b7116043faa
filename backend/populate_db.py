import os
import sys

# Add 'backend' folder to Python path
sys.path.append(os.path.abspath(os.path.dirname(__file__)))

from database import SessionLocal, init_db
from models.users import User
from models.guard import Guard
from models.location import Location
from utils.hashing import get_password_hash

# Configuration
ADMIN_USERNAME = os.getenv("SEED_ADMIN_USERNAME", "admin")
ADMIN_EMAIL = os.getenv("SEED_ADMIN_EMAIL", "admin@example.com")
ADMIN_PASSWORD = os.getenv("SEED_ADMIN_PASSWORD", "admin123")
PLACEHOLDER_AVATAR = "https://res.cloudinary.com/demo/image/upload/sample.jpg"

DEMO_GUARDS = [
    {
        "user_name": "rsingh",
        "full_name": "Ravi Singh",
        "email": "ravi.singh@example.com",
        "residence": "Sector 14, Gurugram",
        "description": "Ex-army, night shift lead",
        "age": 41,
        "is_approved": True,
        "work_history": [{"site": "City Mall", "years": 3}],
        "post": (28.4595, 77.0266, "Main gate, Cyber Hub"),
    },
    {
        "user_name": "amehta",
        "full_name": "Anita Mehta",
        "email": "anita.mehta@example.com",
        "residence": "Andheri East, Mumbai",
        "description": "Event and crowd management",
        "age": 29,
        "is_approved": True,
        "work_history": [],
        "post": None,
    },
    {
        "user_name": "kdas",
        "full_name": "Kunal Das",
        "email": "kunal.das@example.com",
        "residence": "Salt Lake, Kolkata",
        "description": "Residential society patrol",
        "age": 35,
        "is_approved": False,
        "work_history": [{"site": "Green Park Society", "years": 2}],
        "post": None,
    },
]
# End Configuration


def populate(session) -> dict:
    """Create the admin account and demo guards, skipping rows that already exist."""
    created = {"admins": 0, "guards": 0, "locations": 0}

    admin = session.query(User).filter(User.user_name == ADMIN_USERNAME).first()
    if not admin:
        session.add(User(
            user_name=ADMIN_USERNAME,
            full_name="Administrator",
            email=ADMIN_EMAIL,
            password_hash=get_password_hash(ADMIN_PASSWORD),
            role="admin",
            avatar=PLACEHOLDER_AVATAR,
        ))
        created["admins"] += 1

    for entry in DEMO_GUARDS:
        if session.query(Guard).filter(Guard.user_name == entry["user_name"]).first():
            continue

        guard = Guard(
            user_name=entry["user_name"],
            full_name=entry["full_name"],
            email=entry["email"],
            password_hash=get_password_hash("guard123"),
            avatar=PLACEHOLDER_AVATAR,
            residence=entry["residence"],
            description=entry["description"],
            age=entry["age"],
            is_approved=entry["is_approved"],
            work_history=entry["work_history"],
        )
        session.add(guard)
        session.flush()
        created["guards"] += 1

        if entry["post"]:
            lat, lng, address = entry["post"]
            session.add(Location(guard_id=guard.id, latitude=lat, longitude=lng, address=address))
            created["locations"] += 1

    session.commit()
    return created


if __name__ == "__main__":
    init_db()
    session = SessionLocal()
    try:
        result = populate(session)
        print(f"Seed finished: {result}")
    finally:
        session.close()
