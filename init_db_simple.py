#!/usr/bin/env python3
"""Simple database initialization script.

Creates all database tables using SQLAlchemy models.
Run this from the repository root:
    python init_db_simple.py
"""

import sys
from pathlib import Path

# Add repository root to path so we can import modules
sys.path.insert(0, str(Path(__file__).parent))

from apps.gateway.database import Base, engine
from apps.gateway.models import ZoomTenantSettings  # noqa: F401  registers the table

print("🔧 Initializing Tenant Zoom Gateway database...")
print(f"📍 Database URL: {engine.url!r}")

try:
    print("\n📋 Creating tables...")
    Base.metadata.create_all(bind=engine)
    print("✅ Database tables created successfully!")

    print("\n📊 Created tables:")
    for table_name in Base.metadata.tables.keys():
        print(f"  - {table_name}")

except Exception as e:
    print(f"\n❌ Error creating tables: {e}")
    sys.exit(1)
