"""
Visa Route Catalog Loader.

Loads visa route definitions and endorsing-body profiles from YAML files,
enabling:
- Rule updates (fees, thresholds, question wording) without code changes
- Load-time validation of question tags and the Global Talent selector
- Alternative catalogs for tests via a custom directory
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from eligibility.catalog import (
    Difficulty,
    EligibilityCriterion,
    EndorsingBody,
    Question,
    QuestionType,
    Requirements,
    RouteCatalog,
    VisaCategory,
    VisaRoute,
)
from eligibility.endorsement_checker import EndorsementBodyProfile
from eligibility.errors import CatalogError

logger = logging.getLogger(__name__)

# Default data locations
CONFIG_DIR = Path(__file__).parent
ROUTES_DIR = CONFIG_DIR / "visa_routes"
ENDORSING_BODIES_FILE = CONFIG_DIR / "endorsing_bodies.yaml"


class RouteCatalogLoader:
    """
    Builds a ``RouteCatalog`` from a directory of route YAML files.

    One file per route. Routes are ordered by their ``order`` key, then by
    file name.
    """

    def __init__(
        self,
        routes_dir: Optional[Path] = None,
        endorsing_bodies_file: Optional[Path] = None,
    ):
        self.routes_dir = routes_dir or ROUTES_DIR
        self.endorsing_bodies_file = endorsing_bodies_file or ENDORSING_BODIES_FILE
        self._catalog: Optional[RouteCatalog] = None
        self._bodies: Optional[List[EndorsementBodyProfile]] = None

    def load_catalog(self) -> RouteCatalog:
        if self._catalog is not None:
            return self._catalog

        raw_routes = self._load_from_files()
        routes = [self._build_route(raw, source) for source, raw in raw_routes]
        self._catalog = RouteCatalog(routes)
        logger.info(f"Loaded {len(self._catalog)} visa routes from {self.routes_dir}")
        return self._catalog

    def load_endorsing_bodies(self) -> List[EndorsementBodyProfile]:
        if self._bodies is not None:
            return self._bodies

        data = self._read_yaml(self.endorsing_bodies_file) or {}
        bodies = []
        for raw in data.get("bodies", []):
            criteria = raw.get("criteria") or {}
            contact = raw.get("contact") or {}
            try:
                bodies.append(EndorsementBodyProfile(
                    id=raw["id"],
                    name=raw["name"],
                    field=raw["field"],
                    description=raw.get("description", ""),
                    pathways=tuple(raw.get("pathways", [])),
                    talent_criteria=tuple(criteria.get("exceptional_talent", [])),
                    promise_criteria=tuple(criteria.get("exceptional_promise", [])),
                    website=contact.get("website", ""),
                    email=contact.get("email"),
                    phone=contact.get("phone"),
                ))
            except KeyError as exc:
                raise CatalogError(
                    f"endorsing body entry missing {exc.args[0]!r} in {self.endorsing_bodies_file}"
                ) from exc

        self._bodies = bodies
        return bodies

    def _load_from_files(self) -> List[tuple]:
        """Read every route file, sorted by display order."""
        if not self.routes_dir.is_dir():
            raise CatalogError(f"route directory not found: {self.routes_dir}")

        loaded = []
        for path in sorted(self.routes_dir.glob("*.yaml")):
            raw = self._read_yaml(path)
            if not raw:
                logger.warning(f"Skipping empty route file {path.name}")
                continue
            loaded.append((path, raw))

        loaded.sort(key=lambda item: (item[1].get("order", 1000), item[0].name))
        return loaded

    @staticmethod
    def _read_yaml(path: Path) -> Any:
        try:
            with open(path, "r", encoding="utf-8") as f:
                return yaml.safe_load(f)
        except FileNotFoundError as exc:
            raise CatalogError(f"catalog file not found: {path}") from exc
        except yaml.YAMLError as exc:
            raise CatalogError(f"invalid YAML in {path.name}: {exc}") from exc

    def _build_route(self, raw: Dict[str, Any], source: Path) -> VisaRoute:
        route_id = raw.get("id")
        if not route_id:
            raise CatalogError(f"route in {source.name} has no id")

        try:
            questions = tuple(self._build_question(q, route_id) for q in raw.get("questions", []))
            requirements = raw.get("requirements") or {}
            return VisaRoute(
                id=route_id,
                name=raw["name"],
                description=raw.get("description", ""),
                category=VisaCategory(raw["category"]),
                difficulty=Difficulty(raw["difficulty"]),
                processing_time=raw.get("processing_time", ""),
                cost=int(raw.get("cost", 0)),
                ukvi_url=raw.get("ukvi_url", ""),
                ukvi_guidance_url=raw.get("ukvi_guidance_url", ""),
                last_updated=str(raw.get("last_updated", "")),
                questions=questions,
                requirements=Requirements(
                    essential=tuple(requirements.get("essential", [])),
                    desirable=tuple(requirements.get("desirable", [])),
                    disqualifying=tuple(requirements.get("disqualifying", [])),
                ),
                eligibility_criteria=tuple(
                    EligibilityCriterion(
                        category=c["category"],
                        criteria=tuple(c.get("criteria", [])),
                        ukvi_reference=c.get("ukvi_reference", ""),
                    )
                    for c in raw.get("eligibility_criteria", [])
                ),
                min_salary=raw.get("min_salary"),
                selector_question_id=raw.get("selector_question_id"),
            )
        except KeyError as exc:
            raise CatalogError(f"missing field {exc.args[0]!r}", route_id) from exc
        except ValueError as exc:
            raise CatalogError(str(exc), route_id) from exc

    @staticmethod
    def _build_question(raw: Dict[str, Any], route_id: str) -> Question:
        body = raw.get("endorsing_body")
        return Question(
            id=raw["id"],
            text=raw["text"],
            question_type=QuestionType(raw["type"]),
            weight=int(raw["weight"]),
            required=bool(raw.get("required", True)),
            options=tuple(str(o) for o in raw.get("options", [])),
            ukvi_reference=raw.get("ukvi_reference"),
            endorsing_body=EndorsingBody(body) if body else EndorsingBody.NONE,
        )


# Global loader instance
_catalog_loader: Optional[RouteCatalogLoader] = None


def get_catalog_loader() -> RouteCatalogLoader:
    """Get the global catalog loader instance."""
    global _catalog_loader
    if _catalog_loader is None:
        _catalog_loader = RouteCatalogLoader()
    return _catalog_loader


def get_route_catalog() -> RouteCatalog:
    """The bundled visa route catalog."""
    return get_catalog_loader().load_catalog()


def get_endorsing_bodies() -> List[EndorsementBodyProfile]:
    return get_catalog_loader().load_endorsing_bodies()


def clear_catalog_cache() -> None:
    """Drop the cached catalog (useful for testing)."""
    global _catalog_loader
    _catalog_loader = None
