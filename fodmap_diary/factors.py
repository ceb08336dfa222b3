"""Tracked dietary factors and the level scales shared by prompts and UI."""

FACTORS = [
    {"id": "fructans", "name": "Fructans", "category": "fodmap"},
    {"id": "gos", "name": "GOS", "category": "fodmap"},
    {"id": "lactose", "name": "Lactose", "category": "fodmap"},
    {"id": "fructose", "name": "Fructose", "category": "fodmap"},
    {"id": "polyols", "name": "Polyols", "category": "fodmap"},
    {"id": "gluten", "name": "Gluten", "category": "other"},
    {"id": "soy", "name": "Soy", "category": "other"},
    {"id": "nightshades", "name": "Nightshades", "category": "other"},
    {"id": "fibre-insoluble", "name": "Insoluble Fibre", "category": "other"},
    {"id": "fibre-soluble", "name": "Soluble Fibre", "category": "other"},
]

FACTOR_IDS = [f["id"] for f in FACTORS]

LEVELS = ["none", "low", "medium", "high", "unknown"]

SEVERITIES = ["low", "medium", "high"]

# Levels that carry no signal for correlation analysis
SILENT_LEVELS = {"none", "unknown"}
