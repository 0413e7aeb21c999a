"""
Case data loading.

The two authored documents (locations and case introduction) are read
once, eagerly, before any navigation. A failed load is fatal to session
start: the repository keeps the error and reports itself as not loaded.
"""

import asyncio
import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from casebook.config import Settings
from casebook.schemas.case import CaseData
from casebook.schemas.location import Location
from casebook.schemas.validation import validate_case_data, validate_locations
from casebook.utils.logger import get_logger

logger = get_logger(__name__)


class CaseDataLoadError(Exception):
    """Raised when case data is missing or invalid"""


class CaseBundle:
    """Immutable location and case data for one case"""

    def __init__(self, locations: Dict[str, Location], case: CaseData):
        self.locations = locations
        self.case = case

    @property
    def addresses(self) -> List[str]:
        return list(self.locations.keys())


def read_json(path: Path) -> Any:
    """Load JSON from disk and raise CaseDataLoadError on failure"""
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise CaseDataLoadError(f"Case data file not found: {path}") from exc
    except OSError as exc:
        raise CaseDataLoadError(f"Unable to read case data file: {path}") from exc

    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise CaseDataLoadError(f"Invalid JSON in {path}: {exc}") from exc


def parse_case_bundle(locations_document: Any, case_document: Any) -> CaseBundle:
    """Validate both documents and build a bundle"""
    try:
        locations = validate_locations(locations_document)
        case = validate_case_data(case_document)
    except ValueError as exc:
        raise CaseDataLoadError(str(exc)) from exc
    return CaseBundle(locations=locations, case=case)


async def load_case_bundle(locations_path: Path, case_path: Path) -> CaseBundle:
    """Read both documents concurrently and validate them"""
    logger.info(f"[Loader] Loading case data from {locations_path} and {case_path}")
    locations_document, case_document = await asyncio.gather(
        asyncio.to_thread(read_json, locations_path),
        asyncio.to_thread(read_json, case_path),
    )
    bundle = parse_case_bundle(locations_document, case_document)
    logger.info(f"[Loader] Loaded {len(bundle.locations)} locations")
    return bundle


class CaseRepository:
    """Holds the loaded case bundle for the application"""

    def __init__(self, locations_path: Path, case_path: Path):
        self.locations_path = locations_path
        self.case_path = case_path
        self.bundle: Optional[CaseBundle] = None
        self.load_error: Optional[str] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "CaseRepository":
        data_dir = Path(settings.data_dir)
        return cls(data_dir / settings.locations_file, data_dir / settings.case_file)

    @classmethod
    def from_bundle(cls, bundle: CaseBundle) -> "CaseRepository":
        repository = cls(Path(), Path())
        repository.bundle = bundle
        return repository

    @property
    def loaded(self) -> bool:
        return self.bundle is not None

    async def load(self) -> CaseBundle:
        try:
            self.bundle = await load_case_bundle(self.locations_path, self.case_path)
        except CaseDataLoadError as exc:
            self.bundle = None
            self.load_error = str(exc)
            logger.error(f"[Loader] Failed to load case data: {exc}")
            raise
        self.load_error = None
        return self.bundle

    def get_location(self, address: Optional[str]) -> Optional[Location]:
        if self.bundle is None or address is None:
            return None
        return self.bundle.locations.get(address)

    @property
    def case(self) -> Optional[CaseData]:
        return self.bundle.case if self.bundle is not None else None

    @property
    def addresses(self) -> List[str]:
        return self.bundle.addresses if self.bundle is not None else []
