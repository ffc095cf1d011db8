from datetime import date

from sqlmodel import Session, select

from auth import get_password_hash
from db import engine
from models import TimelineEntry, User

DEMO_EMAIL = "rohit.singh@example.com"
DEMO_PASSWORD = "timewise"


def seed_database():
    """Seed the database with a demo user and sample entries."""
    with Session(engine) as session:
        # Check if data already exists
        existing = session.exec(select(User)).first()
        if existing:
            print("Database already has data, skipping seed.")
            return

        user = User(
            email=DEMO_EMAIL,
            username="Rohit Singh",
            hashed_password=get_password_hash(DEMO_PASSWORD),
        )
        session.add(user)
        session.commit()
        session.refresh(user)

        # Sample data
        sample_entries = [
            TimelineEntry(
                user_id=user.id,
                user_name=user.username,
                date=date(2024, 3, 1),  # Friday
                client="client-28",
                task="task-1",
                docket_number="ORCL-1042",
                description="Drafted claims for database sharding application",
                time_spent="03:30",
            ),
            TimelineEntry(
                user_id=user.id,
                user_name=user.username,
                date=date(2024, 3, 1),  # Friday
                client="client-12",
                task="task-19",
                description="Team sync",
                time_spent="00:45",
            ),
            TimelineEntry(
                user_id=user.id,
                user_name=user.username,
                date=date(2024, 3, 6),  # Wednesday
                client="client-16",
                task="task-7",
                docket_number="INTC-IN-207",
                description="Prepared response to first examination report",
                time_spent="05:00",
            ),
        ]

        session.add_all(sample_entries)
        session.commit()
        print(f"Seeded database with user {DEMO_EMAIL} and {len(sample_entries)} sample entries.")


if __name__ == "__main__":
    from db import create_db_and_tables

    create_db_and_tables()
    seed_database()
