"""Pytest fixtures: an isolated in-memory database per test and an API client wired to it."""

import os

# Must be set before escalator.core.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("GEMINI_API_KEY", "")
os.environ.setdefault("SMTP_HOST", "")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

import escalator.models  # noqa: F401
from escalator.api import deps
from escalator.database import Base, build_engine, get_db
from escalator.services.filters import ChangeNotifier, FilterConfigStore, FilteredDatasetProvider
from escalator.services.filter_translator import FilterTranslator
from escalator.services.mail_service import mail_service
from escalator.services.mailer import Mailer
from escalator.services.record_service import record_service
from escalator.services.upload_service import upload_service

HEADER = [
    "Department",
    "File/Activity",
    "Current Level",
    "Pending Since (Days)",
    "TAT (Days)",
    "Next Level",
    "Escalation Authority Email",
    "Remarks",
    "Mail Sent Status",
]


def make_csv(rows, header=None) -> bytes:
    """Build CSV bytes from row tuples in the upload column order."""
    lines = [",".join(header or HEADER)]
    for row in rows:
        lines.append(",".join(str(cell) for cell in row))
    return ("\n".join(lines) + "\n").encode("utf-8")


def sample_row(department="Finance", activity="Invoice 1", pending=10, tat=5, email="boss@example.com", sent="No"):
    return (department, activity, "Clerk", pending, tat, "Manager", email, "Awaiting sign-off", sent)


class FakeSMTP:
    """Records what would have been sent; ``failures`` are raised in order, one per connection."""

    sent = []
    failures = []
    connections = 0
    closed = 0

    def __init__(self, host, port, timeout=None):
        type(self).connections += 1
        self.host = host
        self.port = port

    def starttls(self):
        pass

    def login(self, user, password):
        if type(self).failures:
            raise type(self).failures.pop(0)

    def send_message(self, message):
        type(self).sent.append(message)

    def noop(self):
        return (250, b"OK")

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        type(self).closed += 1

    @classmethod
    def reset(cls):
        cls.sent = []
        cls.failures = []
        cls.connections = 0
        cls.closed = 0


@pytest.fixture
def fake_smtp():
    FakeSMTP.reset()
    yield FakeSMTP
    FakeSMTP.reset()


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def configured_mailer(fake_smtp, sleeps):
    return Mailer(
        host="smtp.example.com",
        port=587,
        user="tracker",
        password="secret",
        sender="tracker@example.com",
        smtp_factory=fake_smtp,
        sleep=sleeps.append,
    )


@pytest.fixture
def engine():
    engine = build_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def notifier():
    return ChangeNotifier()


@pytest.fixture
def store(session_factory, notifier):
    return FilterConfigStore(session_factory, notifier)


@pytest.fixture
def provider(session_factory, store, notifier):
    provider = FilteredDatasetProvider(session_factory, store, notifier)
    yield provider
    provider.close()


@pytest.fixture
def client(session_factory, store, provider, notifier, configured_mailer, monkeypatch):
    from main import app

    # services publish on the test notifier so the test provider sees their writes
    monkeypatch.setattr(upload_service, "notifier", notifier)
    monkeypatch.setattr(mail_service, "notifier", notifier)
    monkeypatch.setattr(record_service, "notifier", notifier)

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    limiter = deps.RateLimiter(30)

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[deps.get_filter_store] = lambda: store
    app.dependency_overrides[deps.get_dataset_provider] = lambda: provider
    app.dependency_overrides[deps.get_mailer] = lambda: configured_mailer
    app.dependency_overrides[deps.get_translator] = lambda: FilterTranslator(api_key=None)
    app.dependency_overrides[deps.get_mail_rate_limiter] = lambda: limiter

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
