"""Tests for the sandbox library/filter merge."""

import pytest

from helpers import executed, make_provider, make_shell
from ibmi_sandbox.configurator import (
    OBJECTS_FILTER_NAME,
    SOURCES_FILTER_NAME,
    SandboxConfigurator,
    apply_sandbox_config,
)
from ibmi_sandbox.host import HostCommands
from ibmi_sandbox.models import ConnectionConfig, ObjectFilter


@pytest.fixture
def existing_filter() -> ObjectFilter:
    return ObjectFilter(name="Mine", library="QGPL", types=frozenset({"*PGM"}))


@pytest.fixture
def fresh_config(existing_filter) -> ConnectionConfig:
    return ConnectionConfig(library_list=("QGPL", "QTEMP"), object_filters=(existing_filter,))


class TestApplySandboxConfig:
    def test_adds_library_once(self, fresh_config):
        updated = apply_sandbox_config(fresh_config, "BOB")
        assert updated.library_list == ("QGPL", "QTEMP", "BOB")
        assert updated.library_list.count("BOB") == 1

    def test_adds_two_filters_for_user(self, fresh_config, existing_filter):
        updated = apply_sandbox_config(fresh_config, "BOB")
        assert len(updated.object_filters) == 2 + len(fresh_config.object_filters)
        assert updated.object_filters[0] == existing_filter

        sources, objects = updated.object_filters[-2:]
        assert sources.name == SOURCES_FILTER_NAME
        assert sources.types == frozenset({"*SRCPF"})
        assert objects.name == OBJECTS_FILTER_NAME
        assert objects.types == frozenset({"*ALL"})
        for f in (sources, objects):
            assert f.library == "BOB"
            assert f.object == "*"
            assert f.member == "*"
            assert f.member_type == ""

    def test_input_snapshot_untouched(self, fresh_config):
        before = fresh_config.model_copy(deep=True)
        apply_sandbox_config(fresh_config, "BOB")
        assert fresh_config == before

    def test_second_merge_is_noop(self, fresh_config):
        once = apply_sandbox_config(fresh_config, "ALICE")
        twice = apply_sandbox_config(once, "ALICE")
        assert twice == once
        assert twice is once

    def test_existing_user_library_is_noop(self):
        config = ConnectionConfig(library_list=("ALICE",))
        assert apply_sandbox_config(config, "ALICE") is config

    def test_extra_keys_preserved(self):
        config = ConnectionConfig.model_validate(
            {"name": "Sandbox-BOB", "libraryList": [], "objectFilters": [], "homeDirectory": "/home/BOB"}
        )
        payload = apply_sandbox_config(config, "BOB").to_payload()
        assert payload["homeDirectory"] == "/home/BOB"
        assert payload["name"] == "Sandbox-BOB"
        assert payload["libraryList"] == ["BOB"]
        assert payload["objectFilters"][0]["memberType"] == ""


class TestSandboxConfigurator:
    @pytest.mark.asyncio
    async def test_persists_and_refreshes(self, fresh_config):
        shell = make_shell()
        provider = make_provider()
        configurator = SandboxConfigurator(provider, HostCommands(shell))

        changed = await configurator.configure(fresh_config, "BOB")

        assert changed is True
        provider.update.assert_awaited_once()
        saved = provider.update.await_args.args[0]
        assert "BOB" in saved.library_list
        assert executed(shell) == [
            "code-for-ibmi.refreshLibraryListView",
            "code-for-ibmi.refreshObjectBrowser",
        ]

    @pytest.mark.asyncio
    async def test_already_configured_does_nothing(self):
        shell = make_shell()
        provider = make_provider()
        configurator = SandboxConfigurator(provider, HostCommands(shell))

        changed = await configurator.configure(ConnectionConfig(library_list=("ALICE",)), "ALICE")

        assert changed is False
        provider.update.assert_not_awaited()
        shell.execute_command.assert_not_awaited()
