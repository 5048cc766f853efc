# tests/conftest.py
import pytest

from app import create_app
from models import TradeRecord


@pytest.fixture
def db_uri(tmp_path):
    return f"sqlite:///{tmp_path / 'journal.db'}"


@pytest.fixture
def app(db_uri):
    return create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': db_uri,
        'SECRET_KEY': 'test',
    })


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_trade():
    counter = iter(range(1, 10000))

    def _make(**fields):
        data = {
            'date': '2024-01-15',
            'pair': 'EUR/USD',
            'type': 'long',
            'setup': 'PT-POF',
            'result': 'win',
            'riskReward': '2',
        }
        data.update(fields)
        return TradeRecord.from_dict(data, trade_id=data.pop('id', None) or f"t{next(counter)}")

    return _make
