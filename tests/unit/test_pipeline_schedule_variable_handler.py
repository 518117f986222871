"""Tests for the PipelineScheduleVariableHandler."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pytest
from gitlab.exceptions import GitlabDeleteError, GitlabGetError

from gitlab_provisioner.core import ManagedObject
from gitlab_provisioner.engine.errors import MalformedIdentifierError
from gitlab_provisioner.engine.pipeline_schedule_variable_handler import (
    PipelineScheduleVariableHandler,
)
from gitlab_provisioner.resources import PipelineScheduleVariableResource

if TYPE_CHECKING:
    from unittest.mock import MagicMock

    from gitlab_provisioner.engine.handlers import EngineContext

SCHEDULE_PATH = "/projects/10/pipeline_schedules/55"


@pytest.fixture
def handler() -> PipelineScheduleVariableHandler:
    return PipelineScheduleVariableHandler()


def _desired(value: str = "hello") -> PipelineScheduleVariableResource:
    return PipelineScheduleVariableResource(
        name="my_var", project="10", pipeline_schedule_id=55, key="MY_VAR", value=value
    )


def _schedule(*variables: dict[str, Any]) -> dict[str, Any]:
    return {"id": 55, "description": "nightly", "variables": list(variables)}


def _prior(value: str = "hello") -> ManagedObject:
    return ManagedObject(
        address="gitlab_pipeline_schedule_variable.my_var",
        resource_type="gitlab_pipeline_schedule_variable",
        id="55:MY_VAR",
        attributes={
            "project": "10",
            "pipeline_schedule_id": 55,
            "key": "MY_VAR",
            "value": value,
        },
    )


class TestCreate:
    def test_create_then_read(
        self,
        ctx: EngineContext,
        handler: PipelineScheduleVariableHandler,
        mock_client: MagicMock,
    ) -> None:
        mock_client.http_post.return_value = {"key": "MY_VAR", "value": "hello"}
        mock_client.http_get.return_value = _schedule({"key": "MY_VAR", "value": "hello"})

        result = handler.create(ctx, _desired())

        mock_client.http_post.assert_called_once_with(
            f"{SCHEDULE_PATH}/variables", post_data={"key": "MY_VAR", "value": "hello"}
        )
        assert result.id == "55:MY_VAR"
        assert result.attributes == {
            "project": "10",
            "pipeline_schedule_id": 55,
            "key": "MY_VAR",
            "value": "hello",
        }


class TestRead:
    def test_finds_variable(
        self,
        ctx: EngineContext,
        handler: PipelineScheduleVariableHandler,
        mock_client: MagicMock,
    ) -> None:
        mock_client.http_get.return_value = _schedule(
            {"key": "OTHER", "value": "x"}, {"key": "MY_VAR", "value": "changed"}
        )

        result = handler.read(ctx, _prior())

        assert result is not None
        assert result.attributes["value"] == "changed"

    def test_missing_key_returns_none(
        self,
        ctx: EngineContext,
        handler: PipelineScheduleVariableHandler,
        mock_client: MagicMock,
    ) -> None:
        mock_client.http_get.return_value = _schedule({"key": "OTHER", "value": "x"})
        assert handler.read(ctx, _prior()) is None

    def test_missing_schedule_returns_none(
        self,
        ctx: EngineContext,
        handler: PipelineScheduleVariableHandler,
        mock_client: MagicMock,
    ) -> None:
        mock_client.http_get.side_effect = GitlabGetError("404", response_code=404)
        assert handler.read(ctx, _prior()) is None


class TestUpdate:
    def test_sends_only_dirty_fields(
        self,
        ctx: EngineContext,
        handler: PipelineScheduleVariableHandler,
        mock_client: MagicMock,
    ) -> None:
        mock_client.http_get.return_value = _schedule({"key": "MY_VAR", "value": "new"})

        result = handler.update(ctx, _desired(value="new"), _prior(value="old"))

        mock_client.http_put.assert_called_once_with(
            f"{SCHEDULE_PATH}/variables/MY_VAR", post_data={"value": "new"}
        )
        assert result.attributes["value"] == "new"

    def test_nothing_dirty_skips_request(
        self,
        ctx: EngineContext,
        handler: PipelineScheduleVariableHandler,
        mock_client: MagicMock,
    ) -> None:
        mock_client.http_get.return_value = _schedule({"key": "MY_VAR", "value": "hello"})

        handler.update(ctx, _desired(), _prior())

        mock_client.http_put.assert_not_called()


class TestDelete:
    def test_deletes(
        self,
        ctx: EngineContext,
        handler: PipelineScheduleVariableHandler,
        mock_client: MagicMock,
    ) -> None:
        handler.delete(ctx, _prior())
        mock_client.http_delete.assert_called_once_with(f"{SCHEDULE_PATH}/variables/MY_VAR")

    @pytest.mark.parametrize("status", [404, 500])
    def test_every_failure_is_raised(
        self,
        ctx: EngineContext,
        handler: PipelineScheduleVariableHandler,
        mock_client: MagicMock,
        status: int,
    ) -> None:
        mock_client.http_delete.side_effect = GitlabDeleteError("nope", response_code=status)

        with pytest.raises(RuntimeError, match="55:MY_VAR failed to delete"):
            handler.delete(ctx, _prior())


class TestImport:
    def test_three_part_id(
        self, ctx: EngineContext, handler: PipelineScheduleVariableHandler
    ) -> None:
        assert handler.import_seed(ctx, "10:55:MY_VAR") == (
            "55:MY_VAR",
            {
                "project": "10",
                "pipeline_schedule_id": 55,
                "key": "MY_VAR",
            },
        )

    def test_non_numeric_schedule(
        self, ctx: EngineContext, handler: PipelineScheduleVariableHandler
    ) -> None:
        with pytest.raises(MalformedIdentifierError, match="pipeline_schedule_id"):
            handler.import_seed(ctx, "10:abc:MY_VAR")

    @pytest.mark.parametrize("import_id", ["55:MY_VAR", "10:55:MY_VAR:x"])
    def test_wrong_arity(
        self, ctx: EngineContext, handler: PipelineScheduleVariableHandler, import_id: str
    ) -> None:
        with pytest.raises(MalformedIdentifierError, match="project_id"):
            handler.import_seed(ctx, import_id)
