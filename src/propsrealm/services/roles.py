"""RoleMappingService — apply and inspect regex role rules."""

from __future__ import annotations

from typing import TYPE_CHECKING

from propsrealm.services.result import ServiceResult
from propsrealm.services.telemetry import traced

if TYPE_CHECKING:
    from collections.abc import Iterable

    from propsrealm.domain.roles import RoleMapper


class RoleMappingService:
    """Wraps a :class:`RoleMapper` built from the ``[role_mapper]`` section."""

    def __init__(self, mapper: RoleMapper) -> None:
        self._mapper = mapper

    @traced
    def map_roles(self, roles: Iterable[str]) -> ServiceResult:
        source = frozenset(roles)
        result = self._mapper.map_roles(source)
        return ServiceResult(
            ok=True,
            op="map_roles",
            data={
                "input": sorted(source),
                "output": sorted(result),
                "added": sorted(result - source),
                "removed": sorted(source - result),
            },
        )

    @traced
    def rules(self) -> ServiceResult:
        """List configured rules in evaluation order, inert ones included."""
        rules = self._mapper.rules
        items = [
            {
                "id": name,
                "regexp": rules[name].pattern,
                "dest_role": rules[name].destination_role,
                "replace": rules[name].replace,
                "active": rules[name].active,
            }
            for name in sorted(rules)
        ]
        warnings = [f"Rule {item['id']!r} is inert (needs regexp and destRole)" for item in items if not item["active"]]
        return ServiceResult(
            ok=True,
            op="list_rules",
            data={"items": items, "count": len(items)},
            warnings=warnings,
        )
