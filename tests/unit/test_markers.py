"""Tests for declarative field markers and introspection helpers."""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import BaseModel

from gitlab_provisioner.resources.markers import (
    ApiField,
    Compare,
    CreateOnly,
    ForceNew,
    Sensitive,
    build_api_payload,
    compare_strategies,
    extract_api_attrs,
    force_new_fields,
    mutable_fields,
    sensitive_fields,
    unreadable_fields,
)
from gitlab_provisioner.resources.pipeline_schedule_variable import (
    PipelineScheduleVariableResource,
)
from gitlab_provisioner.resources.protected_environment import ProtectedEnvironmentResource
from gitlab_provisioner.resources.user import UserResource


def _user(**overrides: Any) -> UserResource:
    fields: dict[str, Any] = {
        "name": "alice",
        "username": "alice",
        "password": "s3cret-pass",
        "email": "alice@example.com",
        "display_name": "Alice",
    }
    fields.update(overrides)
    return UserResource(**fields)


# ── ApiField tests ──────────────────────────────────────────────────


class TestExtractApiAttrs:
    def test_read_key_used_for_response(self) -> None:
        class M(BaseModel):
            is_admin: Annotated[bool, ApiField("admin", read_key="is_admin")] = False

        assert extract_api_attrs(M, {"is_admin": True, "admin": False}) == {"is_admin": True}

    def test_missing_key_returns_default(self) -> None:
        class M(BaseModel):
            timezone: Annotated[str, ApiField("cron_timezone")] = "UTC"

        assert extract_api_attrs(M, {}) == {"timezone": "UTC"}

    def test_required_field_missing_returns_none(self) -> None:
        class M(BaseModel):
            key: Annotated[str, ApiField("key")]

        assert extract_api_attrs(M, {}) == {"key": None}

    def test_unreadable_fields_skipped(self) -> None:
        wire = {
            "username": "alice",
            "email": "alice@example.com",
            "name": "Alice",
            "is_admin": False,
            "can_create_group": True,
            "projects_limit": 10,
        }
        attrs = extract_api_attrs(UserResource, wire)
        assert "password" not in attrs
        assert "confirm" not in attrs
        assert attrs["display_name"] == "Alice"
        assert attrs["can_create_group"] is True


class TestBuildApiPayload:
    def test_uses_wire_keys(self) -> None:
        payload = build_api_payload(_user(is_admin=True))
        assert payload == {
            "username": "alice",
            "password": "s3cret-pass",
            "email": "alice@example.com",
            "name": "Alice",
            "admin": True,
            "can_create_group": False,
            "projects_limit": 0,
        }

    def test_fields_filter(self) -> None:
        assert build_api_payload(_user(), fields=["display_name"]) == {"name": "Alice"}

    def test_none_omitted(self) -> None:
        class M(BaseModel):
            value: Annotated[str | None, ApiField("value")] = None

        assert build_api_payload(M()) == {}


# ── Lifecycle markers ───────────────────────────────────────────────


class TestLifecycleMarkers:
    def test_force_new_fields(self) -> None:
        assert force_new_fields(PipelineScheduleVariableResource) == {
            "project",
            "pipeline_schedule_id",
            "key",
        }

    def test_mutable_fields_exclude_force_new_and_create_only(self) -> None:
        assert mutable_fields(PipelineScheduleVariableResource) == ["value"]
        assert "email" not in mutable_fields(UserResource)
        assert "confirm" not in mutable_fields(UserResource)
        assert "password" in mutable_fields(UserResource)

    def test_sensitive_and_unreadable(self) -> None:
        assert sensitive_fields(_user()) == {"password"}
        assert unreadable_fields(UserResource) == {"password", "confirm"}

    def test_markers_on_plain_model(self) -> None:
        class M(BaseModel):
            a: Annotated[str, ForceNew()] = ""
            b: Annotated[str, CreateOnly()] = ""
            c: Annotated[str, Sensitive()] = ""
            d: str = ""

        assert force_new_fields(M) == {"a"}
        assert unreadable_fields(M) == {"b", "c"}


# ── Compare tests ───────────────────────────────────────────────────


class TestCompareStrategies:
    def test_protected_environment_levels_are_partial(self) -> None:
        assert compare_strategies(ProtectedEnvironmentResource) == {
            "deploy_access_levels": "partial"
        }

    def test_exact_strategy(self) -> None:
        class M(BaseModel):
            labels: Annotated[dict[str, str], Compare("exact")] = {}

        assert compare_strategies(M()) == {"labels": "exact"}

    def test_no_markers(self) -> None:
        class M(BaseModel):
            name: str = ""

        assert compare_strategies(M) == {}
