"""
Populate timeline_templates with the standard session-type timelines
Existing templates with the same session type are replaced.

Run with: python -m migrations.populate_timeline_templates
"""

import sys
from pathlib import Path

# Add project root to path
root_dir = Path(__file__).parent.parent
sys.path.insert(0, str(root_dir))

from dotenv import load_dotenv

env_path = root_dir / ".env"
load_dotenv(env_path)

if not env_path.exists():
    print(f"⚠️  Warning: .env file not found at {env_path}")
else:
    print(f"✅ Loaded .env from {env_path}")

from migrations.timeline_templates import get_standard_templates
from studio import models  # noqa: F401
from studio.cache import build_cache
from studio.database import Base, SessionLocal, engine
from studio.domain.timeline.errors import InvalidTemplateError
from studio.domain.timeline.template_store import TemplateStore


def populate_templates():
    """Insert or replace every standard template"""
    Base.metadata.create_all(bind=engine, checkfirst=True)

    db = SessionLocal()
    try:
        store = TemplateStore(db, build_cache())
        templates = get_standard_templates()
        print(f"🔍 Seeding {len(templates)} timeline templates...\n")

        failed = 0
        for i, template in enumerate(templates, 1):
            try:
                saved = store.put_template(template)
                print(f"{i}. ✅ {saved.sessionType}: {len(saved.tasks)} tasks")
            except InvalidTemplateError as e:
                failed += 1
                print(f"{i}. ❌ {template['sessionType']}: {e.message}")

        print(f"\n📊 Done: {len(templates) - failed} saved, {failed} failed")
        return failed == 0
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(0 if populate_templates() else 1)
