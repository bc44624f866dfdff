"""Tests for the landing flow."""

import asyncio
import json

import pytest

from tax_intake.autosave import AutoSaveCoordinator, SavingIndicator
from tax_intake.orchestrator import IntakeFlow, create_app_components
from tax_intake.services.storage import JsonFileSessionStore
from tax_intake.session import AccessError, SessionManager, encode_access_token


@pytest.fixture
def flow(session_manager, audit_logger):
    coordinator = AutoSaveCoordinator(
        session_manager,
        debounce_seconds=10,
        indicator=SavingIndicator(0),
        retry_attempts=1,
        retry_wait_min=0,
        retry_wait_max=0,
        audit_logger=audit_logger,
    )
    return IntakeFlow(session_manager, coordinator, audit_logger)


def link(email: str) -> dict:
    return {"user": encode_access_token(email)}


class TestStart:
    """Access check, session and resume."""

    def test_new_visitor(self, flow, remote_store, audit_sink):
        form, session, notices = asyncio.run(flow.start(link("a@b.co")))

        assert session.session_id == "session-1"
        assert session.email == "a@b.co"
        assert notices == []
        assert flow.form is form
        assert remote_store.create_calls == 1

        granted = [e for e in audit_sink.events if e.event_type.value == "access_granted"]
        assert len(granted) == 1
        assert granted[0].correlation_id is not None

    def test_invalid_link_blocks(self, flow, remote_store, audit_sink):
        with pytest.raises(AccessError):
            asyncio.run(flow.start({"user": "%%%"}))

        assert remote_store.create_calls == 0
        assert flow.form is None
        assert audit_sink.types() == ["access_denied"]

    def test_missing_token_blocks(self, flow):
        with pytest.raises(AccessError):
            asyncio.run(flow.start("https://forms.example.com/"))

    def test_returning_visitor_resumes(self, flow, remote_store, session_manager):
        asyncio.run(session_manager.initialize_session("a@b.co"))
        remote_store.progress["session-1"] = {"income": {"services": "250.00"}}

        form, session, notices = asyncio.run(flow.start(link("a@b.co")))

        assert session.session_id == "session-1"
        assert remote_store.create_calls == 1
        assert form.income.get("services") == "250.00"
        assert form.summary.total_revenue == "250.00"
        assert not flow.coordinator.has_unsaved_changes

    def test_link_for_another_email_starts_fresh(self, flow, remote_store, session_manager, audit_sink):
        asyncio.run(session_manager.initialize_session("other@b.co"))

        form, session, notices = asyncio.run(flow.start(link("a@b.co")))

        assert session.email == "a@b.co"
        assert session.session_id == "session-2"
        assert "session_cleared" in audit_sink.types()

    def test_init_failure_becomes_notice(self, flow, remote_store):
        remote_store.fail_create = True

        form, session, notices = asyncio.run(flow.start(link("a@b.co")))

        assert session is None
        assert len(notices) == 1
        assert "InitFailed" in notices[0]
        assert form.summary.net_income == "0.00"

    def test_load_failure_becomes_notice(self, flow, remote_store):
        remote_store.fail_load = True

        form, session, notices = asyncio.run(flow.start(link("a@b.co")))

        assert session.session_id == "session-1"
        assert len(notices) == 1
        assert "LoadFailed" in notices[0]

    def test_corrupt_session_file_is_discarded(self, tmp_path, remote_store, audit_logger):
        path = tmp_path / "session.json"
        path.write_text("{not json")
        manager = SessionManager(remote_store, JsonFileSessionStore(path), audit_logger=audit_logger)
        coordinator = AutoSaveCoordinator(
            manager,
            debounce_seconds=10,
            indicator=SavingIndicator(0),
            retry_attempts=1,
            retry_wait_min=0,
            retry_wait_max=0,
            audit_logger=audit_logger,
        )
        flow = IntakeFlow(manager, coordinator, audit_logger)

        async def scenario():
            first = await flow.start(link("a@b.co"))
            again = await flow.start_new_session("a@b.co")
            return first, again

        (_, session, notices), (_, new_session, new_notices) = asyncio.run(scenario())

        assert session.session_id == "session-1"
        assert len(notices) == 1
        assert "could not be read" in notices[0]
        assert new_session.session_id == "session-2"
        assert new_notices == []
        assert json.loads(path.read_text())["formSession"]["sessionId"] == "session-2"

    def test_rejected_pages_reported(self, flow, remote_store, session_manager):
        asyncio.run(session_manager.initialize_session("a@b.co"))
        remote_store.progress["session-1"] = {"balance": {"assets": 12}}

        form, session, notices = asyncio.run(flow.start(link("a@b.co")))

        assert notices == ["Some saved answers could not be restored: balance"]


class TestStartNewSession:
    """Starting over from the wizard."""

    def test_flushes_old_session_then_opens_new_one(self, flow, remote_store):
        async def scenario():
            old_form, _, _ = await flow.start(link("a@b.co"))
            old_form.income.set_value("services", "1")
            new_form, session, notices = await flow.start_new_session("a@b.co")
            old_form.income.set_value("services", "2")
            new_form.income.set_value("services", "3")
            await flow.finish()
            return new_form, session

        new_form, session = asyncio.run(scenario())

        assert session.session_id == "session-2"
        assert [(s[0], s[2]["income"]["services"]) for s in remote_store.saves] == [
            ("session-1", "1.00"),
            ("session-2", "3.00"),
        ]
        assert new_form.income.get("services") == "3.00"


class TestFinish:
    """Leaving the wizard."""

    def test_finish_flushes_pending_saves(self, flow, remote_store):
        async def scenario():
            form, _, _ = await flow.start(link("a@b.co"))
            form.partners.add_partner(name="Ana")
            await flow.finish()

        asyncio.run(scenario())

        assert len(remote_store.saves) == 1
        assert remote_store.saves[0][2]["partners"]["partners"][0]["name"] == "Ana"
        assert flow.coordinator.closed

    def test_leave_page_flushes(self, flow, remote_store):
        async def scenario():
            form, _, _ = await flow.start(link("a@b.co"))
            form.costs.set_value("services.cost", "7")
            await flow.leave_page("costs")

        asyncio.run(scenario())
        assert remote_store.saves[0][2]["costs"]["services"]["cost"] == "7.00"


class TestCreateAppComponents:
    """Factory wiring."""

    def test_wires_given_stores(self, remote_store, session_store, audit_logger):
        flow = create_app_components(
            remote_store=remote_store,
            session_store=session_store,
            audit_logger=audit_logger,
        )

        form, session, notices = asyncio.run(flow.start(link("a@b.co")))

        assert session.session_id == "session-1"
        assert session_store.get("formSession")["sessionId"] == "session-1"
        assert isinstance(flow.coordinator, AutoSaveCoordinator)
