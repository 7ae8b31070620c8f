import pytest

from auth.providers.local import LocalIdentityProvider
from services.session import SessionGate, SessionState


class RecordingConsumer:
    """Opens one categories feed per user and records what it sees."""

    def __init__(self, feeds):
        self.feeds = feeds
        self.opened_for = []
        self.snapshots = []
        self.resets = 0

    def open(self, user):
        self.opened_for.append(user.id)
        return [
            self.feeds.open_categories(
                user.id, lambda items: self.snapshots.append((user.id, items)), lambda e: None
            )
        ]

    def reset(self):
        self.resets += 1
        self.snapshots = []


@pytest.fixture
def identity(db_manager_with_schema):
    return LocalIdentityProvider(db_manager_with_schema)


@pytest.fixture
def two_users(db_manager_with_schema):
    signup = LocalIdentityProvider(db_manager_with_schema)
    ana = signup.sign_up("ana@example.com", "secret1", "Ana")
    bob = signup.sign_up("bob@example.com", "secret1", "Bob")
    return ana, bob


class TestSessionGate:
    """Tests for SessionGate."""

    def test_unknown_until_resolved(self, identity):
        """Test that the gate neither opens feeds nor redirects before resolution."""
        gate = SessionGate(identity)

        assert gate.state is SessionState.UNKNOWN
        assert not gate.requires_login

    def test_anonymous_requires_login(self, identity):
        """Test that a signed-out session asks for login."""
        redirects = []
        gate = SessionGate(identity, on_anonymous=lambda: redirects.append(True))

        identity.restore(None)

        assert gate.state is SessionState.ANONYMOUS
        assert gate.requires_login
        assert redirects == [True]

    def test_attach_after_sign_in_opens_feeds(self, services, identity, two_users):
        """Test that a consumer attached to a signed-in gate opens immediately."""
        ana, _ = two_users
        identity.restore(ana.id)
        gate = SessionGate(identity)
        consumer = RecordingConsumer(services.feeds)

        gate.attach(consumer)

        assert gate.state is SessionState.AUTHENTICATED
        assert consumer.opened_for == [ana.id]
        assert gate.open_feed_count == 1

    def test_attach_before_sign_in_waits(self, services, identity, two_users):
        """Test that feeds open only once the user signs in."""
        ana, _ = two_users
        gate = SessionGate(identity)
        consumer = RecordingConsumer(services.feeds)
        gate.attach(consumer)

        assert consumer.opened_for == []

        identity.sign_in("ana@example.com", "secret1")

        assert consumer.opened_for == [ana.id]

    def test_sign_out_closes_feeds(self, services, identity, two_users):
        """Test that signing out closes every dependent feed."""
        ana, _ = two_users
        identity.restore(ana.id)
        gate = SessionGate(identity)
        gate.attach(RecordingConsumer(services.feeds))

        identity.sign_out()

        assert gate.requires_login
        assert gate.open_feed_count == 0
        assert services.store.listener_count() == 0

    def test_switching_users_never_leaks_data(self, services, identity, two_users):
        """Test that old feeds close and consumers reset before new feeds open."""
        ana, bob = two_users
        services.categories.create("Ana's", "#111111", ana.id)
        services.categories.create("Bob's", "#222222", bob.id)
        identity.restore(ana.id)
        gate = SessionGate(identity)
        consumer = RecordingConsumer(services.feeds)
        gate.attach(consumer)

        identity.sign_in("bob@example.com", "secret1")
        services.categories.create("Ana's second", "#333333", ana.id)

        assert consumer.resets == 1
        assert consumer.opened_for == [ana.id, bob.id]
        assert [owner for owner, _ in consumer.snapshots] == [bob.id]
        assert [c.name for c in consumer.snapshots[0][1]] == ["Bob's"]
        assert gate.open_feed_count == 1

    def test_close_releases_everything(self, services, identity, two_users):
        """Test that closing the gate closes feeds and stops following identity."""
        ana, _ = two_users
        identity.restore(ana.id)
        gate = SessionGate(identity)
        consumer = RecordingConsumer(services.feeds)
        gate.attach(consumer)

        gate.close()
        identity.sign_out()

        assert services.store.listener_count() == 0
        assert consumer.resets == 0
