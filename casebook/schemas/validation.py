"""
Schema validation utilities
"""

from typing import Any, Dict

from jsonschema import ValidationError, validate

from .case import CaseData
from .location import Location

# Structural shape of the two authored documents, checked before model parsing
LOCATIONS_DOCUMENT_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "minProperties": 1,
    "additionalProperties": {"type": "object"},
}

CASE_DOCUMENT_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "case title": {"type": "string"},
        "date": {"type": "string"},
        "intro": {"type": "string"},
        "outro": {"type": "string"},
        "case_summary": {
            "type": "object",
            "properties": {
                "case_description": {"type": "string"},
                "leads": {
                    "type": "array",
                    "items": {"type": "object", "required": ["name"]},
                },
                "holmesLeads": {"type": "integer", "minimum": 0},
            },
        },
    },
    "required": ["intro"],
}


def validate_json_schema(data: Any, schema: Dict[str, Any]) -> bool:
    """Validate data against a JSON schema"""
    try:
        validate(instance=data, schema=schema)
        return True
    except ValidationError as e:
        raise ValueError(f"JSON schema validation failed: {e.message}")


def validate_location(location_data: Dict[str, Any]) -> Location:
    """Validate and parse a single location record"""
    try:
        return Location.model_validate(location_data)
    except Exception as e:
        raise ValueError(f"Invalid location: {e}")


def validate_locations(document: Any) -> Dict[str, Location]:
    """Validate and parse the address -> location document"""
    validate_json_schema(document, LOCATIONS_DOCUMENT_SCHEMA)

    locations: Dict[str, Location] = {}
    for address, location_data in document.items():
        try:
            locations[address] = validate_location(location_data)
        except ValueError as e:
            raise ValueError(f"{address}: {e}")
    return locations


def validate_case_data(document: Any) -> CaseData:
    """Validate and parse the case introduction document"""
    validate_json_schema(document, CASE_DOCUMENT_SCHEMA)
    try:
        return CaseData.model_validate(document)
    except Exception as e:
        raise ValueError(f"Invalid case data: {e}")
