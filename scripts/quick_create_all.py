"""Create all tables for a quick dev setup (NOT for production)."""
from __future__ import annotations

from dotenv import load_dotenv

load_dotenv()

from qaforum import create_app  # noqa: E402
from qaforum.db.session import db  # noqa: E402
from qaforum.db.base import Base  # noqa: E402
from qaforum.db.models import question  # noqa: E402,F401


def main() -> None:
    app = create_app()
    with app.app_context():
        assert db.engine is not None
        Base.metadata.create_all(db.engine)
        print("Tables created.")


if __name__ == "__main__":
    main()
