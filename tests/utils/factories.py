"""Test data factories using Faker."""

from faker import Faker
from typing import Optional

fake = Faker()


def fake_id() -> str:
    """ULID-like 26 character ID."""
    return fake.uuid4().replace('-', '')[:26].upper()


def create_agent_data(user_id: Optional[str] = None, role: str = "agent") -> dict:
    """Create test field agent row."""
    return {
        "id": fake_id(),
        "user_id": user_id or fake.uuid4(),
        "full_name": fake.name(),
        "email": fake.email(),
        "phone_number": fake.phone_number(),
        "role": role,
        "status": "active",
    }


def create_land_listing_data(**overrides) -> dict:
    """Create test land listing form data."""
    data = {
        "title": f"{fake.random_int(min=1, max=20)} Hectare Agricultural Land in {fake.city()}",
        "description": fake.text(max_nb_chars=120),
        "region": "Kindia",
        "city": fake.city(),
        "neighborhood": fake.street_name(),
        "address": fake.street_address(),
        "coordinates_lat": float(fake.latitude()),
        "coordinates_lng": float(fake.longitude()),
        "land_size_value": 5,
        "land_size_unit": "HECTARES",
        "land_type": "agricultural",
        "topography": "flat",
        "soil_type": "loam",
        "zoning": "agricultural",
        "title_status": "titled",
        "access_road": True,
        "utilities_available": ["water", "electricity"],
        "total_price": 250000000,
        "currency_code": "GNF",
    }
    data.update(overrides)
    return data


def create_vendor_data(**overrides) -> dict:
    """Create test vendor data."""
    data = {
        "business_name": fake.company(),
        "contact_person": fake.name(),
        "phone": fake.phone_number(),
        "email": fake.company_email(),
        "address": fake.address(),
        "price_per_unit": 85000,
        "currency": "GNF",
        "quantity_available": fake.random_int(min=10, max=500),
        "minimum_order_quantity": 5,
    }
    data.update(overrides)
    return data


def create_product_data(**overrides) -> dict:
    """Create test product form data."""
    data = {
        "product_name": "Portland Cement 50kg",
        "category": "Cement & Concrete",
        "brand": fake.company(),
        "unit_measure": "BAG",
        "quantity_available": fake.random_int(min=10, max=500),
        "buy_price": 80000,
        "sell_price": 95000,
        "currency": "GNF",
        "specifications": {"grade": "42.5R", "weight": "50kg"},
        "vendor": create_vendor_data(),
    }
    data.update(overrides)
    return data
