"""
DentalRef - Test Configuration
==============================

Shared pytest fixtures for all tests.
"""

import json
from pathlib import Path

import pytest

from dentalref.core.config import DEFAULT_DATA_DIR, get_settings
from dentalref.shared.models import CriteriaProfile, Material, Procedure


# =============================================================================
# Materials
# =============================================================================

def make_material(id: str = "mat-test", **kwargs) -> Material:
    """Build a material with sensible blanks for omitted fields."""
    return Material(
        id=id,
        name=kwargs.pop("name", "Test Material"),
        category=kwargs.pop("category", "Restorative"),
        **kwargs
    )


@pytest.fixture
def zirconia():
    """High-strength prosthodontic crown material."""
    return make_material(
        "mat-zirconia",
        name="Zirconia Crown",
        category="Prosthodontic",
        properties={
            "strength": "Very High",
            "aesthetics": "Good",
            "durability": "15+ years",
            "biocompatibility": "Excellent",
            "wear_resistance": "Excellent",
        },
        indications=["Posterior crowns", "Bridges"],
        contraindications=["Insufficient tooth reduction space"],
        longevity="15+ years",
        cost_considerations="High cost",
    )


@pytest.fixture
def composite():
    """Aesthetic direct restorative."""
    return make_material(
        "mat-composite",
        name="Composite Resin",
        category="Restorative",
        properties={
            "strength": "Moderate",
            "aesthetics": "Excellent",
            "durability": "5-10 years",
            "biocompatibility": "Good",
            "fluoride_release": "No",
        },
        indications=["Anterior restoration", "Posterior restoration"],
        contraindications=["Resin allergy"],
        longevity="5-10 years",
        cost_considerations="Moderate cost",
    )


@pytest.fixture
def amalgam():
    """Strong, cheap, unaesthetic restorative."""
    return make_material(
        "mat-amalgam",
        name="Dental Amalgam",
        category="Restorative",
        properties={
            "strength": "High",
            "aesthetics": "Poor",
            "durability": "10-15 years",
            "biocompatibility": "Moderate",
        },
        indications=["Posterior restoration"],
        contraindications=["Mercury allergy"],
        longevity="10-15 years",
        cost_considerations="Low cost",
    )


@pytest.fixture
def glass_ionomer():
    """Fluoride-releasing low-strength restorative."""
    return make_material(
        "mat-gic",
        name="Glass Ionomer",
        category="Restorative",
        properties={
            "strength": "Low",
            "aesthetics": "Fair",
            "biocompatibility": "Excellent",
            "fluoride_release": "Yes",
        },
        indications=["Pediatric restoration"],
        contraindications=["High stress-bearing areas"],
        longevity="3-5 years",
        cost_considerations="Low cost, cost-effective",
    )


@pytest.fixture
def materials(zirconia, composite, amalgam, glass_ionomer):
    """Four materials in a fixed order."""
    return [zirconia, composite, amalgam, glass_ionomer]


# =============================================================================
# Procedures
# =============================================================================

def make_procedure(id: str, name: str, category: str, **kwargs) -> Procedure:
    """Build a procedure with empty lists for omitted fields."""
    return Procedure(id=id, name=name, category=category, **kwargs)


@pytest.fixture
def root_canal():
    return make_procedure(
        "proc-rct",
        "Root Canal Treatment",
        "Endodontic",
        diagnosis="Irreversible pulpitis",
        differential_diagnosis=["Reversible pulpitis", "Cracked tooth syndrome"],
        investigations=["Periapical radiograph", "Vitality testing"],
    )


@pytest.fixture
def procedures(root_canal):
    """A small procedure catalogue in dataset order."""
    return [
        root_canal,
        make_procedure(
            "proc-extraction", "Simple Extraction", "Oral Surgery",
            diagnosis="Non-restorable tooth",
        ),
        make_procedure("proc-implant", "Implant Placement", "Oral Surgery"),
        make_procedure("proc-postop", "Post-operative Review", "Oral Surgery"),
        make_procedure("proc-crown", "Crown Preparation", "Restorative"),
        make_procedure("proc-perio", "Periodontal Scaling", "Periodontal"),
        make_procedure("proc-maintenance", "Periodontal Maintenance", "Periodontal"),
        make_procedure("proc-sealant", "Fissure Sealant", "Preventive"),
        make_procedure("proc-fluoride", "Fluoride Varnish", "Preventive"),
        make_procedure("proc-prophy", "Prophylaxis", "Hygiene"),
        make_procedure("proc-trauma", "Dental Trauma", "Emergency"),
    ]


# =============================================================================
# Criteria Profiles
# =============================================================================

@pytest.fixture
def neutral_profile():
    """Defaults only; no conditional rule fires."""
    return CriteriaProfile()


@pytest.fixture
def posterior_restoration_profile():
    """Posterior restoration under high stress."""
    return CriteriaProfile(
        procedure_type="restoration",
        location="posterior",
        stress_level="high",
    )


# =============================================================================
# Mock Repository
# =============================================================================

class MockMaterialRepository:
    """In-memory stand-in exposing get_material_by_id()."""

    def __init__(self, materials: list = None):
        self._materials = {m.id: m for m in (materials or [])}

    def get_material_by_id(self, id_or_name: str):
        return self._materials.get(id_or_name)


@pytest.fixture
def mock_material_repository(materials):
    """Get mock material repository."""
    return MockMaterialRepository(materials)


# =============================================================================
# Data Directories
# =============================================================================

@pytest.fixture
def bundled_data_dir() -> Path:
    """Directory holding the packaged sample datasets."""
    return DEFAULT_DATA_DIR


@pytest.fixture
def temp_data_dir(tmp_path):
    """Temporary data directory with a two-material, two-procedure dataset."""
    data_dir = tmp_path / "data"
    data_dir.mkdir()

    write_json(data_dir / "materials.json", {
        "materials": [
            {
                "id": "m-1",
                "name": "Alpha Ceramic",
                "category": "Prosthodontic",
                "properties": {"strength": "High", "aesthetics": "Excellent"},
                "indications": ["Crowns"],
                "contraindications": None,
                "handling_characteristics": None,
                "longevity": "15+ years",
                "cost_considerations": "High cost",
            },
            {
                "id": "m-2",
                "name": "Beta Cement",
                "category": "Restorative",
                "properties": None,
                "indications": [],
                "contraindications": ["Mercury allergy"],
                "handling_characteristics": [],
                "longevity": "3-5 years",
                "cost_considerations": "Low cost",
            },
        ],
        "categories": ["Prosthodontic", "Restorative"],
    })
    write_json(data_dir / "procedures.json", {
        "procedures": [
            {
                "id": "p-1",
                "name": "Root Canal Treatment",
                "category": "Endodontic",
                "diagnosis": "Irreversible pulpitis",
                "differential_diagnosis": ["Reversible pulpitis"],
                "investigations": ["Periapical radiograph"],
                "management_plan": [
                    {"step": 1, "title": "Access", "description": "Access cavity"}
                ],
                "references": [],
            },
            {
                "id": "p-2",
                "name": "Pulpotomy",
                "category": "Endodontic",
                "diagnosis": "Pulp exposure",
                "differential_diagnosis": None,
                "investigations": None,
                "management_plan": None,
                "references": None,
            },
        ],
        "categories": ["Endodontic"],
    })
    return data_dir


# =============================================================================
# Environment
# =============================================================================

@pytest.fixture(autouse=True)
def set_test_env(monkeypatch):
    """Set test environment variables and reset cached settings."""
    monkeypatch.setenv("ENVIRONMENT", "test")
    monkeypatch.delenv("DENTALREF_DATA_DIR", raising=False)
    monkeypatch.delenv("DENTALREF_CACHE_TTL_SECONDS", raising=False)
    monkeypatch.delenv("DENTALREF_CACHE_CAPACITY", raising=False)
    monkeypatch.delenv("LOG_FORMAT", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


# =============================================================================
# Helpers
# =============================================================================

def write_json(path: Path, payload) -> None:
    """Write a JSON payload to disk."""
    path.write_text(json.dumps(payload), encoding="utf-8")


def messages(outcome) -> list:
    """All explanation strings of a match outcome or scored result."""
    return list(outcome.reasoning) + list(outcome.warnings) + list(outcome.alternatives)
