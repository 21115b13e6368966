"""Seed data for the War Room – creates the demo portfolio on startup."""
from __future__ import annotations

import logging
import random
from datetime import date, timedelta
from typing import Any, Dict, List, Optional

from warroom.status_engine.item_model import BOQCategory
from warroom.projects.store import ProjectStore

logger = logging.getLogger(__name__)

SEED = 20240115

AREAS = [
    "Living Room", "Master Bedroom", "Kitchen", "Dining", "Study",
    "Guest Suite", "Terrace", "Entrance", "Bathroom", "Walk-in Closet",
]

ITEM_DESCRIPTIONS = {
    BOQCategory.JOINERY: ["Built-in Wardrobe", "Kitchen Cabinets", "TV Unit", "Bookshelf", "Vanity Unit", "Bar Counter"],
    BOQCategory.LOOSE_FURNITURE: ["Sofa 3-seater", "Armchair", "Dining Table", "Dining Chairs", "Bed Frame", "Ottoman"],
    BOQCategory.LIGHTING: ["Pendant Light", "Chandelier", "Wall Sconce", "Floor Lamp", "Recessed Downlight", "LED Strip"],
    BOQCategory.FINISHES: ["Wall Paint", "Wallpaper", "Floor Tiles", "Carpet", "Wood Flooring", "Stone Cladding"],
    BOQCategory.FFE: ["Curtains", "Blinds", "Cushions", "Rugs", "Bedding Set", "Artwork"],
    BOQCategory.ACCESSORIES: ["Vase", "Sculpture", "Photo Frame", "Candle Holder", "Decorative Bowl", "Plants"],
    BOQCategory.APPLIANCES: ["Refrigerator", "Oven", "Dishwasher", "Air Conditioner", "Wine Cooler", "Coffee Machine"],
}

SUPPLIERS = [
    "Poliform", "B&B Italia", "Minotti", "Flos", "Artemide",
    "Miele", "Sub-Zero", "Roche Bobois", "Cassina", "Knoll",
]

# (code, name, client, location, manager, start offset days, duration days, items, progress)
SAMPLE_PROJECTS = [
    ("VL-001", "Villa Serena", "Al Rashid Family", "Palm Jumeirah, Dubai", "Sarah Mitchell", -90, 170, 85, 0.65),
    ("PH-002", "Skyline Penthouse", "Chen Holdings", "Downtown Dubai", "Marco Rossi", -45, 200, 45, 0.30),
    ("BR-003", "Boutique Resort Suites", "Luxe Hospitality Group", "Ras Al Khaimah", "Emma Thompson", -150, 180, 120, 0.90),
    ("OF-004", "Corporate HQ Redesign", "Emirates Finance Corp", "DIFC, Dubai", "Ahmed Hassan", -60, 115, 95, 0.50),
    ("RS-005", "Royal Suite Renovation", "Al Maktoum Investments", "Emirates Hills", "Sarah Mitchell", -120, 140, 65, 0.97),
    ("YT-006", "Yacht Interior Fit-out", "Maritime Luxury LLC", "Dubai Marina", "Marco Rossi", -30, 190, 25, 0.10),
]


def generate_items(
    project_code: str,
    count: int,
    progress: float,
    start: date,
    rng: random.Random,
) -> List[Dict[str, Any]]:
    """
    Generate item rows in varied lifecycle states.

    `progress` in [0, 1] shifts the mix towards approved / installed items.
    """
    categories = list(BOQCategory)
    rows = []

    for i in range(count):
        category = categories[i % len(categories)]
        area = rng.choice(AREAS)
        factor = min(1.0, rng.random() * 0.6 + progress * 0.5)

        boq_included = factor > 0.15
        if not boq_included:
            approval = "pending"
        elif factor > 0.7:
            approval = "approved"
        elif factor > 0.4:
            approval = "pending"
        elif factor > 0.25:
            approval = "revision"
        else:
            approval = "rejected"
        purchased = approval == "approved" and factor > 0.5
        received = purchased and factor > 0.75
        installed = received and factor > 0.85

        production_due = start + timedelta(days=rng.randint(20, 80)) if purchased else None
        delivery = production_due + timedelta(days=rng.randint(7, 30)) if production_due else None
        received_on = delivery - timedelta(days=rng.randint(0, 5)) if received and delivery else None
        install_start = received_on + timedelta(days=rng.randint(2, 10)) if received_on else None
        installed_on = install_start + timedelta(days=rng.randint(1, 5)) if installed and install_start else None

        rows.append({
            "id": f"{project_code}-ITM-{i + 1:04d}",
            "item_code": f"{category.value[:3].upper()}-{i + 1:03d}",
            "category": category.value,
            "area": area,
            "description": f"{rng.choice(ITEM_DESCRIPTIONS[category])} - {area}",
            "boq_included": boq_included,
            "approval_status": approval,
            "purchased": purchased,
            "purchase_order_ref": f"PO-{project_code}-{rng.randint(0, 999):04d}" if purchased else None,
            "production_due_date": production_due,
            "delivery_date": delivery,
            "received": received,
            "received_date": received_on,
            "installation_start_date": install_start,
            "installed": installed,
            "installed_date": installed_on,
            "supplier": rng.choice(SUPPLIERS),
            "unit_cost": float(rng.randint(500, 50000)),
            "quantity": float(rng.randint(1, 10)),
        })

    return rows


def seed_demo_projects(store: ProjectStore, today: Optional[date] = None) -> int:
    """
    Populate the store with the demo portfolio.

    Dates are laid out relative to `today` so delivery risk stays meaningful.

    Returns:
        Number of projects created
    """
    today = today or date.today()
    rng = random.Random(SEED)

    for code, name, client, location, manager, offset, duration, count, progress in SAMPLE_PROJECTS:
        start = today + timedelta(days=offset)
        store.create_project({
            "id": f"proj-{code.lower()}",
            "code": code,
            "name": name,
            "client": client,
            "location": location,
            "project_manager": manager,
            "start_date": start,
            "target_completion_date": start + timedelta(days=duration),
            "boq_master_ref": f"BOQ-{code}",
            "boq_version": "1.0",
            "items": generate_items(code, count, progress, start, rng),
        })

    logger.info(f"Seeded {len(SAMPLE_PROJECTS)} demo projects")
    return len(SAMPLE_PROJECTS)
