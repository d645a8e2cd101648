"""Seed the database with one admin, one staff member and a few products."""
import uuid
from decimal import Decimal

from stockroom.auth import get_password_hash
from stockroom.database import SessionLocal
from stockroom.models import Product, User


USERS = [
    {
        'id': uuid.UUID('00000000-0000-0000-0000-000000000101'),
        'name': 'Warehouse Admin',
        'email': 'admin@stockroom.local',
        'tel': '+1-555-0100',
        'password': 'admin123',
        'role': 'admin',
    },
    {
        'id': uuid.UUID('00000000-0000-0000-0000-000000000102'),
        'name': 'Sam Staff',
        'email': 'staff@stockroom.local',
        'tel': '+1-555-0101',
        'password': 'staff123',
        'role': 'staff',
    },
]

PRODUCTS = [
    {
        'id': uuid.UUID('00000000-0000-0000-0000-000000000201'),
        'name': 'Cordless Drill',
        'sku': 'TOOL-DRL-001',
        'description': '18V cordless drill with two batteries',
        'category': 'tools',
        'price': Decimal('89.90'),
        'stock_quantity': 25,
        'unit': 'pcs',
    },
    {
        'id': uuid.UUID('00000000-0000-0000-0000-000000000202'),
        'name': 'Wood Screws 4x40',
        'sku': 'FAST-SCR-440',
        'description': 'Box of 200 zinc plated wood screws',
        'category': 'fasteners',
        'price': Decimal('6.50'),
        'stock_quantity': 300,
        'unit': 'box',
    },
    {
        'id': uuid.UUID('00000000-0000-0000-0000-000000000203'),
        'name': 'Safety Gloves',
        'sku': 'PPE-GLV-010',
        'description': 'Cut resistant work gloves, size L',
        'category': 'safety',
        'price': Decimal('4.20'),
        'stock_quantity': 80,
        'unit': 'pair',
    },
]


def seed():
    """Seed database with demo data."""
    db = SessionLocal()

    try:
        for user_data in USERS:
            data = dict(user_data)
            password = data.pop('password')
            db.add(User(password_hash=get_password_hash(password), **data))

        for product_data in PRODUCTS:
            db.add(Product(**product_data))

        db.commit()
        print("✅ Database seeded successfully!")
        print("\nDemo users:")
        for user_data in USERS:
            print(f"  {user_data['email']}/{user_data['password']} ({user_data['role']})")

    except Exception as e:
        db.rollback()
        print(f"❌ Error seeding database: {e}")
        raise
    finally:
        db.close()


if __name__ == "__main__":
    seed()
