"""
UniArchive API - Test Configuration and Fixtures
"""
import os
import tempfile
from typing import Callable, Dict, Any, Generator, List

import mongomock
import pytest
from faker import Faker
from fastapi.testclient import TestClient

# Set testing environment before the app modules read their settings
os.environ['ENVIRONMENT'] = 'testing'
os.environ['DATABASE_URL'] = ''
os.environ['DATABASE_NAME'] = ''
os.environ['UPLOAD_DIR'] = tempfile.mkdtemp(prefix='uniarchive-uploads-')
os.environ['AI_API_KEY'] = ''
os.environ['SMTP_USER'] = ''
os.environ['SMTP_PASSWORD'] = ''

import catalog
import database
from emailer import email_service
from main import app

fake = Faker()


@pytest.fixture
def mongo_db(monkeypatch):
    """Fresh in-memory MongoDB database for each test"""
    mdb = mongomock.MongoClient()['uniarchive_test']
    monkeypatch.setattr(database, 'db', mdb)
    database.ensure_indexes()
    return mdb


@pytest.fixture
def client(mongo_db) -> Generator[TestClient, None, None]:
    with TestClient(app) as c:
        yield c


def resource_metadata(**overrides) -> Dict[str, Any]:
    data = {
        'title': fake.sentence(nb_words=4),
        'courseCode': 'bmat202l',
        'slot': 'b1',
        'type': 'Notes',
        'topics': ['Probability'],
        'completeness': 80,
        'author': fake.user_name(),
        'professor': 'Prof. Sharma',
    }
    data.update(overrides)
    return data


@pytest.fixture
def make_resource(mongo_db) -> Callable[..., Dict[str, Any]]:
    """Create a resource through the catalog; counters may be preset"""
    def _make(upvotes: int = 0, downloads: int = 0, views: int = 0, **overrides) -> Dict[str, Any]:
        doc = catalog.create_resource(resource_metadata(**overrides), 'http://testserver/uploads/test.pdf')
        counters = {'upvotes': upvotes, 'downloads': downloads, 'views': views}
        if any(counters.values()):
            mongo_db['resource'].update_one({'_id': doc['_id']}, {'$set': counters})
            doc = catalog.get_resource(str(doc['_id']))
        return doc
    return _make


@pytest.fixture
def sent_emails(monkeypatch) -> List[Dict[str, str]]:
    """Capture outgoing mail instead of talking to SMTP"""
    outbox: List[Dict[str, str]] = []

    def fake_send(to_email: str, subject: str, text: str) -> None:
        outbox.append({'to': to_email, 'subject': subject, 'text': text})

    monkeypatch.setattr(email_service, 'send_email', fake_send)
    return outbox
