"""RealmService — loading and inspecting the live snapshot."""

from __future__ import annotations

from propsrealm.domain.errors import LineDecodeError, LoadError, NoRealmFoundError
from propsrealm.services._helpers import epoch_ms_to_iso
from propsrealm.services.base import BaseService
from propsrealm.services.result import ServiceResult
from propsrealm.services.telemetry import trace_span, traced


class RealmService(BaseService):
    """Reloads the properties files and reports realm state."""

    @traced
    def load(self) -> ServiceResult:
        """(Re)load the configured users and groups files.

        On failure the previously published snapshot stays live.
        """
        op = "realm_load"
        config = self._realm.config
        detail = {
            "users_properties": str(config.users_properties) if config.users_properties else None,
            "groups_properties": str(config.groups_properties) if config.groups_properties else None,
        }

        with trace_span("load_files") as span:
            try:
                snapshot = self._realm.load_files()
            except NoRealmFoundError as exc:
                return ServiceResult.failure(op, "NO_REALM", str(exc), **detail)
            except LineDecodeError as exc:
                notes = getattr(exc, "__notes__", [])
                return ServiceResult.failure(
                    op, "LOAD_FAILED", str(exc), partial=exc.partial, where=notes, **detail
                )
            except LoadError as exc:
                return ServiceResult.failure(op, "LOAD_FAILED", str(exc), **detail)
            if span:
                span.annotate("accounts", len(snapshot))

        group_only = sum(1 for account in snapshot.accounts.values() if not account.has_secret)
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "realm_name": snapshot.realm_name,
                "accounts": len(snapshot),
                "group_only": group_only,
                "load_time": epoch_ms_to_iso(snapshot.load_time),
            },
        )

    @traced
    def status(self) -> ServiceResult:
        """Report whether a snapshot is live and what it holds."""
        config = self._realm.config
        data: dict[str, object] = {
            "loaded": self._realm.loaded,
            "plain_text": config.plain_text,
            "groups_attribute": config.groups_attribute,
        }
        snapshot = self._realm.store.current()
        if snapshot is not None:
            data["realm_name"] = snapshot.realm_name
            data["accounts"] = len(snapshot)
            data["load_time"] = epoch_ms_to_iso(snapshot.load_time)
        return ServiceResult(ok=True, op="realm_status", data=data)
