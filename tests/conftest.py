"""
Pytest configuration and shared fixtures for the poop bot tests.
"""

import datetime
import sys
from pathlib import Path

import pytest

# Modules live flat under app/
app_dir = Path(__file__).parent.parent / "app"
sys.path.insert(0, str(app_dir))

import crud  # noqa: E402
import database  # noqa: E402
from line_client import Profile  # noqa: E402
from models import PoopType  # noqa: E402

# Wednesday; the ISO week started on Monday 2025-02-17
NOW = datetime.datetime(2025, 2, 19, 15, 0, 0)


class FakeMessenger:
    """Records outbound calls instead of talking to LINE."""

    def __init__(self):
        self.texts = []
        self.images = []
        self.profile_calls = []
        self.pictures = {}
        self.fail_for = {}

    def reply_text(self, reply_token, text, quote_token=None):
        self.texts.append(text)

    def reply_image(self, reply_token, image_url):
        self.images.append(image_url)

    def get_profile(self, user_id, group_id=None):
        self.profile_calls.append((user_id, group_id))
        if user_id in self.fail_for:
            raise self.fail_for[user_id]
        return Profile(user_id=user_id, display_name=f"name-{user_id}", picture_url=self.pictures.get(user_id))


@pytest.fixture
def db():
    """Fresh in-memory database for each test."""
    database.init_db("sqlite:///:memory:")
    yield
    database.Base.metadata.drop_all(bind=database.engine)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def messenger():
    return FakeMessenger()


@pytest.fixture
def add_record(db):
    """Insert a record directly, bypassing the rate limit."""
    def _add(user_id, group_id="G1", when=NOW, poop_type=PoopType.GOOD, user_name=None):
        return crud.create_record(user_id, group_id, user_name or f"name-{user_id}", poop_type, when)
    return _add


def message_event_dict(text, user_id="U1", group_id=None, reply_token="reply-token"):
    if group_id is None:
        source = {"type": "user", "userId": user_id}
    else:
        source = {"type": "group", "groupId": group_id, "userId": user_id}
    return {
        "type": "message",
        "mode": "active",
        "timestamp": 1739948400000,
        "source": source,
        "webhookEventId": "01JMEXAMPLEEVENTID0000000",
        "deliveryContext": {"isRedelivery": False},
        "replyToken": reply_token,
        "message": {"type": "text", "id": "468789577898262530", "quoteToken": "quote-token", "text": text},
    }
