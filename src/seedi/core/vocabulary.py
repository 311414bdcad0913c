"""
Reference vocabularies offered to users when defining their context.

These lists are advisory: context fields are free text and are never
validated against them.
"""

WILDCARD_REGION = "All"
ALL_CATEGORIES = "All"

ROLES = ("Farmer", "Policymaker", "SME", "Researcher", "Investor")

OBJECTIVES = (
    "Increase Production",
    "Reduce Losses",
    "Improve Sustainability",
    "Increase Income",
    "Add Value",
    "Improve Water Use",
    "Improve Soil Health",
)

REGIONS = (
    "East Africa",
    "West Africa",
    "Southern Africa",
    "South Asia",
    "Southeast Asia",
    "Latin America",
    "Central Asia",
    "Middle East & North Africa",
)

AGRO_ZONES = (
    "Tropical Humid",
    "Tropical Sub-Humid",
    "Semi-Arid",
    "Arid",
    "Highland",
    "Mediterranean",
    "Temperate",
)

BUDGET_LEVELS = ("Low", "Medium", "High")
FARM_SIZES = ("Small (<2 ha)", "Medium (2-10 ha)", "Large (>10 ha)")
CLIMATE_RISK_LEVELS = ("Low", "Medium", "High", "Very High")

CATEGORIES = (
    "Crop Production",
    "Soil Health & Fertility",
    "Water Management",
    "Pest & Disease Management",
    "Post-Harvest Management",
    "Climate-Smart Agriculture",
    "Agroecological Practices",
    "Livestock & Integrated Farming",
)

RISK_NOTES = (
    "Climate variability may affect projected outcomes. Monitor seasonal forecasts.",
    "Adoption rates vary by region. Local extension services recommended for "
    "implementation support.",
    "Budget and infrastructure requirements should be verified against local conditions.",
)

# Choices offered for each UserContext field, keyed by attribute name
CONTEXT_OPTIONS: dict[str, tuple[str, ...]] = {
    "role": ROLES,
    "primary_objective": OBJECTIVES,
    "region": REGIONS,
    "agro_ecological_zone": AGRO_ZONES,
    "budget_level": BUDGET_LEVELS,
    "farm_size": FARM_SIZES,
    "climate_risk_level": CLIMATE_RISK_LEVELS,
}
