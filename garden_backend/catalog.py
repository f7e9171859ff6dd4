"""
Predefined activity catalog.
Static, immutable templates users log against.
"""
from dataclasses import dataclass
from typing import Dict, Optional, Tuple


@dataclass(frozen=True)
class CatalogEntry:
    id: str
    category: str
    name: str
    level: str
    points: int
    is_diminishing: bool
    daily_cap: Optional[int] = None
    weekly_cap: Optional[int] = None
    comment: str = ""


ACTIVITY_CATALOG: Tuple[CatalogEntry, ...] = (
    # Fitness
    CatalogEntry("F1", "Fitness 🏋️", "Hypertrophy workout ≥ 60 min (RIR ≤ 2)", "Hard", 30,
                 is_diminishing=True, daily_cap=1, comment="Max 1× per day for recovery"),
    CatalogEntry("F2", "Fitness 🏋️", "Mobility / active recovery ≥ 20 min", "Light", 12,
                 is_diminishing=True, comment="Second block = 0.75×"),
    CatalogEntry("F3", "Fitness 🏋️", "Tracked macros for the whole day", "—", 10,
                 is_diminishing=False, daily_cap=1, comment="Once per day"),

    # Movement
    CatalogEntry("M1", "Movement 🚴", "Light walk (15–30 min, ≥ 3 MET)", "Move-Light", 8,
                 is_diminishing=True, daily_cap=2, comment="Second walk 0.75×"),
    CatalogEntry("M2", "Movement 🚴", "Moderate cardio (30–60 min)", "Move-Mod", 12,
                 is_diminishing=False, daily_cap=1, comment="Zone 2, once per day"),
    CatalogEntry("M3", "Movement 🚴", "Intense cardio (> 60 min)", "Move-Intense", 18,
                 is_diminishing=False, daily_cap=1, comment="High load, below a strength workout"),

    # Steps
    CatalogEntry("S3", "Steps 👟", "Step goal reached (≥ 8,000 steps)", "Daily-Bin", 10,
                 is_diminishing=False, daily_cap=1, comment="Binary daily task"),

    # Work
    CatalogEntry("W1", "Work 💻", "6–8 h focused work day", "Base", 15,
                 is_diminishing=False, daily_cap=1, comment="Daily token"),
    CatalogEntry("W2", "Work 💻", "Flow day with > 1 key deliverable", "Elite", 25,
                 is_diminishing=False, daily_cap=1, comment="Max 1× per day"),

    # Reading
    CatalogEntry("R1", "Reading 📚", "20 min non-fiction / self-development reading", "Base", 10,
                 is_diminishing=True, comment="Second session 0.75×"),
    CatalogEntry("R2", "Reading 📚", "60 min reading with notes", "Deep", 18,
                 is_diminishing=True, daily_cap=2, comment="Long-form deep reading"),

    # Self-care
    CatalogEntry("S1", "Self-Care 🌿", "Home improvement, wellness, long walk", "—", 10,
                 is_diminishing=True, comment="Avoids token grinding"),
    CatalogEntry("S2", "Self-Care 🌿", "Growth day (farm visit, retreat, ...)", "XL", 20,
                 is_diminishing=False, weekly_cap=1, comment="Rare events"),

    # Social
    CatalogEntry("SO1", "Social 🤝", "Meeting friends (comfort zone)", "Base", 8,
                 is_diminishing=True, comment="Second meeting 0.75×"),
    CatalogEntry("SO2", "Social 🤝", "Event > 2 h with new people", "Bold", 15,
                 is_diminishing=True, daily_cap=1, comment="High effort"),

    # Planning
    CatalogEntry("P1", "Planning 📅", "Event/ticket booked and scheduled", "—", 12,
                 is_diminishing=False, comment="Every plan counts fully"),
    CatalogEntry("P2", "Planning 📅", "Monthly roadmap / OKRs revised", "—", 15,
                 is_diminishing=False, weekly_cap=1, comment="Max 1× per week"),

    # Organisation
    CatalogEntry("O1", "Organisation 🗂️", "Bills, supplement order, ...", "Quick", 5,
                 is_diminishing=True, comment="Several mini tasks diminish"),
    CatalogEntry("O2", "Organisation 🗂️", "> 1 h admin sprint", "Deep", 12,
                 is_diminishing=False, daily_cap=1, comment="Clearly bounded block"),

    # Digital detox
    CatalogEntry("D1", "Digital-Detox 📵", "30 min smartphone-free", "Block", 3,
                 is_diminishing=False, daily_cap=4, comment="Cap = 4× per day"),
    CatalogEntry("D2", "Digital-Detox 📵", "2 h offline deep work", "Block+", 10,
                 is_diminishing=False, daily_cap=2, comment="Cap = 2× per day"),

    # Psyche
    CatalogEntry("PS1", "Psyche 🧠", "10 min meditation / CBT journaling", "Base", 5,
                 is_diminishing=True, comment="Second session 0.75×"),
    CatalogEntry("PS2", "Psyche 🧠", "< 10 min OCD loop (self-check)", "Clean", 8,
                 is_diminishing=False, daily_cap=1, comment="Daily status"),
)

_CATALOG_BY_ID: Dict[str, CatalogEntry] = {entry.id: entry for entry in ACTIVITY_CATALOG}


def get_activity_by_id(activity_id: str) -> Optional[CatalogEntry]:
    """Look up a catalog entry by id"""
    return _CATALOG_BY_ID.get(activity_id)
