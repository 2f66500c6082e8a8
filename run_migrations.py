"""Simple migration runner for SQLite using provided SQL files in migrations/"""
from pathlib import Path
import sqlite3

from sqlmodel import SQLModel, create_engine

from student_api import models  # noqa: F401

BASE = Path(__file__).parent
DB_PATH = BASE / "student_api.db"
MIGRATIONS = sorted((BASE / "migrations").glob("*.sql"))


def run(db_path: Path = DB_PATH, migrations=None):
    """Create the tables and execute SQL seed files against a SQLite database.

    Every `migrations/*.sql` file is applied in lexical order. The seed
    files use `INSERT OR IGNORE`, so running twice is harmless.
    """
    migrations = MIGRATIONS if migrations is None else migrations
    print("Using database:", db_path)
    engine = create_engine(f"sqlite:///{db_path}")
    SQLModel.metadata.create_all(engine)
    engine.dispose()

    conn = sqlite3.connect(db_path)
    try:
        cur = conn.cursor()
        for m in migrations:
            print("Applying:", m.name)
            cur.executescript(m.read_text(encoding="utf-8"))
        conn.commit()
    finally:
        conn.close()
    print("Migrations applied.")


if __name__ == '__main__':
    run()
