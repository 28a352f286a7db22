#!/usr/bin/env python3
"""
Create the first admin account.

Usage:
  python scripts/create_admin.py admin@example.com 'S3cret!pass' "Super Admin" 9876543210
  # Requires DATABASE_URL and SECRET_KEY in .env (or export)
"""
import asyncio
import os
import sys

# Load .env from project root
try:
    from dotenv import load_dotenv
    _root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    load_dotenv(os.path.join(_root, ".env"))
except ImportError:
    pass

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from academy.database import AsyncSessionLocal, close_db
from academy.services.user_service import UserService


async def create_admin(email: str, password: str, name: str, phone: str) -> int:
    try:
        async with AsyncSessionLocal() as db:
            admin = await UserService.create_admin(db, email=email, password=password, name=name, phone=phone)
    except ValueError as e:
        print(f"ERROR: {e}")
        return 1
    finally:
        await close_db()
    print(f"Created admin {admin.email} ({admin.id})")
    return 0


def main():
    if len(sys.argv) != 5:
        print(__doc__)
        sys.exit(2)
    _, email, password, name, phone = sys.argv
    sys.exit(asyncio.run(create_admin(email, password, name, phone)))


if __name__ == "__main__":
    main()
