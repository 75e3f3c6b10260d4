# ABOUTME: Best-effort resolution of partial location input to a LocationRef.
# ABOUTME: Village ancestors fill missing ids; every failed lookup degrades to null.

from collections.abc import Awaitable, Callable
from typing import TypeVar

import structlog

from newsdesk.db.repository import LocationRepository
from newsdesk.db.session import SavepointFactory, no_savepoint
from newsdesk.models import LocationPayload, LocationRef, Lookup

log = structlog.get_logger()

T = TypeVar("T")


class LocationResolver:
    """Resolves village > mandal > district > state references. Never raises."""

    def __init__(
        self, repo: LocationRepository, savepoint: SavepointFactory = no_savepoint
    ) -> None:
        self.repo = repo
        self.savepoint = savepoint

    async def _lookup(
        self, level: str, entity_id: str | None, fetch: Callable[[str], Awaitable[T | None]]
    ) -> Lookup[T]:
        if not entity_id:
            return Lookup.ok(None)
        try:
            async with self.savepoint():
                found = await fetch(entity_id)
        except Exception as e:
            log.warning("location_lookup_degraded", level=level, id=entity_id, error=str(e))
            return Lookup.failed(e)
        if found is None:
            log.debug("location_not_found", level=level, id=entity_id)
        return Lookup.ok(found)

    async def resolve(self, payload: LocationPayload | None) -> LocationRef:
        """Resolve a location payload.

        Ids supplied by the caller are never overwritten by the village's
        ancestor chain; the chain only fills the gaps.
        """
        loc = payload or LocationPayload()
        degraded: list[str] = []

        village_lookup = await self._lookup("village", loc.village_id, self.repo.get_village)
        if village_lookup.degraded:
            degraded.append("village")
        village = village_lookup.value

        chain_mandal = village.mandal if village else None
        chain_district = chain_mandal.district if chain_mandal else None
        chain_state = chain_district.state if chain_district else None

        mandal_id = loc.mandal_id or (chain_mandal.id if chain_mandal else None)
        district_id = loc.district_id or (chain_district.id if chain_district else None)
        state_id = loc.state_id or (chain_state.id if chain_state else None)

        state_lookup = await self._lookup("state", state_id, self.repo.get_state)
        district_lookup = await self._lookup("district", district_id, self.repo.get_district)
        mandal_lookup = await self._lookup("mandal", mandal_id, self.repo.get_mandal)
        for level, lookup in (
            ("state", state_lookup),
            ("district", district_lookup),
            ("mandal", mandal_lookup),
        ):
            if lookup.degraded:
                degraded.append(level)

        state_name = _first(_name(state_lookup.value), _name(chain_state), loc.state_name)
        district_name = _first(
            _name(district_lookup.value), _name(chain_district), loc.district_name
        )
        mandal_name = _first(_name(mandal_lookup.value), _name(chain_mandal), loc.mandal_name)
        village_name = _first(_name(village), loc.village_name)

        display_name = _first(village_name, mandal_name, district_name, state_name, loc.city)
        address = f"{district_name}, {state_name}" if district_name and state_name else None
        place_id = _first(loc.village_id, mandal_id, district_id, state_id, loc.place_id)

        return LocationRef(
            village_id=loc.village_id,
            village_name=village_name,
            mandal_id=mandal_id,
            mandal_name=mandal_name,
            district_id=district_id,
            district_name=district_name,
            state_id=state_id,
            state_name=state_name,
            city=loc.city,
            place_id=place_id,
            display_name=display_name,
            address=address,
            degraded=degraded,
        )


def _name(entity: object | None) -> str | None:
    name = getattr(entity, "name", None)
    if not isinstance(name, str):
        return None
    return name.strip() or None


def _first(*values: str | None) -> str | None:
    for value in values:
        if value:
            return value
    return None
