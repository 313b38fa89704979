"""Tests for the per-session permission state and auth notifications."""

import logging
import uuid

from schoolfees.core.permissions import Role
from schoolfees.core.roles import Actor
from schoolfees.core.session import ActorSession, AuthEvent, AuthStateNotifier


def make_actor(role: str | None = "SchoolAdmin", email: str = "admin@school.zm") -> Actor:
    return Actor(id=uuid.uuid4(), email=email, role=role)


class TestActorSession:
    """Tests for ActorSession."""

    def test_anonymous(self):
        """Test a session without actor."""
        session = ActorSession.start(None)

        assert not session.is_authenticated
        assert not session.has_any_role
        assert not session.is_allowed("pupils", "read")
        assert session.permissions() == []

    def test_school_admin(self):
        """Test predicates of a SchoolAdmin session."""
        session = ActorSession.start(make_actor("SchoolAdmin"))

        assert session.is_authenticated
        assert session.is_school_admin
        assert not session.is_admin
        assert not session.can_access_emergency
        assert session.is_allowed("payments", "create")
        assert not session.is_allowed("payments", "delete")
        assert session.has_capability("can_manage_financials")

    def test_director_is_admin(self):
        """Test Director counts as admin but not as SuperAdmin."""
        session = ActorSession.start(make_actor("Director"))

        assert session.is_director
        assert session.is_admin
        assert not session.is_super_admin
        assert not session.can_access_emergency

    def test_break_glass(self):
        """Test the session uses the forced role."""
        actor = make_actor("SchoolAdmin", email="ops@school.zm")
        session = ActorSession.start(actor, {"ops@school.zm": Role.SUPER_ADMIN})

        assert session.is_super_admin
        assert session.can_access_emergency
        assert session.is_allowed("system", "backup")

    def test_evaluate_returns_reason(self):
        """Test denials carry a reason."""
        decision = ActorSession.start(make_actor("SchoolAdmin")).evaluate("users", "read")

        assert not decision
        assert decision.reason


class TestAuthStateNotifier:
    """Tests for the auth event dispatcher."""

    async def test_publish_in_order(self):
        """Test subscribers are called in registration order."""
        notifier = AuthStateNotifier()
        calls: list[str] = []

        async def first(event, actor):
            calls.append("first")

        async def second(event, actor):
            calls.append("second")

        notifier.subscribe(first)
        notifier.subscribe(second)
        await notifier.publish(AuthEvent.SIGNED_IN, make_actor())

        assert calls == ["first", "second"]

    async def test_unsubscribe(self):
        """Test unsubscribed handlers are not called."""
        notifier = AuthStateNotifier()
        calls: list[AuthEvent] = []

        async def handler(event, actor):
            calls.append(event)

        unsubscribe = notifier.subscribe(handler)
        assert notifier.subscriber_count == 1
        unsubscribe()
        unsubscribe()
        await notifier.publish(AuthEvent.SIGNED_IN, make_actor())

        assert calls == []
        assert notifier.subscriber_count == 0

    async def test_subscribe_twice_registers_once(self):
        """Test duplicate subscriptions are ignored."""
        notifier = AuthStateNotifier()

        async def handler(event, actor):
            pass

        notifier.subscribe(handler)
        notifier.subscribe(handler)

        assert notifier.subscriber_count == 1

    async def test_failing_handler_is_logged(self, caplog):
        """Test a raising handler does not stop later subscribers."""
        notifier = AuthStateNotifier()
        calls: list[str] = []

        async def broken(event, actor):
            raise RuntimeError("subscriber down")

        async def healthy(event, actor):
            calls.append("healthy")

        notifier.subscribe(broken)
        notifier.subscribe(healthy)
        with caplog.at_level(logging.ERROR, logger="schoolfees.core.session"):
            await notifier.publish(AuthEvent.SIGNED_IN, make_actor())

        assert calls == ["healthy"]
        assert "Auth event handler failed on signed_in" in caplog.text
        assert "subscriber down" in caplog.text


class TestSessionWatch:
    """Tests for keeping a session in sync with auth events."""

    async def test_role_change_refreshes(self):
        """Test the cached role is re-resolved on role change."""
        notifier = AuthStateNotifier()
        actor = make_actor("SchoolAdmin")
        session = ActorSession.start(actor)
        session.watch(notifier)

        await notifier.publish(AuthEvent.ROLE_CHANGED, Actor(id=actor.id, email=actor.email, role="Director"))

        assert session.role == Role.DIRECTOR

    async def test_other_actor_ignored(self):
        """Test events about other actors do not touch the session."""
        notifier = AuthStateNotifier()
        session = ActorSession.start(make_actor("SchoolAdmin"))
        session.watch(notifier)

        await notifier.publish(AuthEvent.ROLE_CHANGED, make_actor("SuperAdmin", email="other@school.zm"))

        assert session.role == Role.SCHOOL_ADMIN

    async def test_sign_in_fills_empty_session(self):
        """Test an anonymous session picks up the signed in actor."""
        notifier = AuthStateNotifier()
        session = ActorSession.start(None)
        session.watch(notifier, {"ops@school.zm": Role.SUPER_ADMIN})

        await notifier.publish(AuthEvent.SIGNED_IN, make_actor(None, email="ops@school.zm"))

        assert session.is_super_admin

    async def test_sign_out_clears(self):
        """Test sign out drops actor and role."""
        notifier = AuthStateNotifier()
        actor = make_actor("Director")
        session = ActorSession.start(actor)
        session.watch(notifier)

        await notifier.publish(AuthEvent.SIGNED_OUT, actor)

        assert not session.is_authenticated
        assert session.role is None

    async def test_unwatch(self):
        """Test the returned callable stops updates."""
        notifier = AuthStateNotifier()
        actor = make_actor("SchoolAdmin")
        session = ActorSession.start(actor)
        unwatch = session.watch(notifier)
        unwatch()

        await notifier.publish(AuthEvent.SIGNED_OUT, actor)

        assert session.role == Role.SCHOOL_ADMIN
