# models.py

import uuid
from dataclasses import dataclass, field, asdict
from datetime import date, datetime
from enum import Enum

from flask_sqlalchemy import SQLAlchemy

# Create the SQLAlchemy db instance.
db = SQLAlchemy()


class Pair(str, Enum):
    EUR_USD = 'EUR/USD'
    GBP_USD = 'GBP/USD'
    USD_JPY = 'USD/JPY'
    USD_CHF = 'USD/CHF'
    AUD_USD = 'AUD/USD'
    NZD_USD = 'NZD/USD'
    USD_CAD = 'USD/CAD'


class Session(str, Enum):
    LONDON = 'London'
    NEW_YORK = 'New York'
    TOKYO = 'Tokyo'
    SYDNEY = 'Sydney'


class TradeType(str, Enum):
    LONG = 'long'
    SHORT = 'short'


class Setup(str, Enum):
    PT_POF = 'PT-POF'
    PT_COF = 'PT-COF'
    CT_POF = 'CT-POF'
    CT_COF = 'CT-COF'


class H4Bias(str, Enum):
    PRO = 'pro'
    COUNTER = 'counter'


class M15Poi(str, Enum):
    EXTREME_REFINED = 'extreme refined'
    FLIP_REFINED = 'flip refined'
    OVERALL_POI = 'overall POI'


class EntryType(str, Enum):
    OFRA_1M = '1m ofra'
    FIRST_TAP_SWEEP = '1st tap sweep'
    FIRST_TAP = '1st tap'


class Result(str, Enum):
    WIN = 'win'
    LOSS = 'loss'


class Timeframe(str, Enum):
    """Chart timeframes a screenshot can be attached for."""
    DAILY = 'daily'
    H4 = 'h4'
    M15 = 'm15'
    M1 = 'm1'


REQUIRED_FIELDS = ('date', 'pair', 'type', 'result')

# Enumerated fields and the type each one is checked against
ENUM_FIELDS = {
    'pair': Pair,
    'session': Session,
    'type': TradeType,
    'setup': Setup,
    'h4': H4Bias,
    'm15': M15Poi,
    'entry': EntryType,
    'result': Result,
}


class ValidationError(ValueError):
    """Raised when trade input is incomplete or carries an unknown value."""

    def __init__(self, message, missing=None):
        super().__init__(message)
        self.missing = list(missing or [])


def _parse_enum(enum_cls, name, value):
    if value in (None, ''):
        return None
    try:
        return enum_cls(value)
    except ValueError:
        raise ValidationError(f'Invalid {name}: {value!r}') from None


def _parse_date(value):
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        # Accepts "YYYY-MM-DD" and full ISO timestamps
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError:
        raise ValidationError(f'Invalid date: {value!r}') from None


def _parse_screenshots(value):
    screenshots = {}
    if value and not isinstance(value, dict):
        raise ValidationError(f'Invalid screenshots: {value!r}')
    for key, payload in (value or {}).items():
        if not payload:
            continue
        try:
            timeframe = Timeframe(key)
        except ValueError:
            raise ValidationError(f'Invalid screenshot timeframe: {key!r}') from None
        screenshots[timeframe] = payload
    return screenshots


@dataclass(frozen=True)
class TradeRecord:
    id: str
    date: date
    pair: Pair
    type: TradeType
    result: Result
    session: Session = None
    setup: Setup = None
    h4: H4Bias = None
    m15: M15Poi = None
    entry: EntryType = None
    risk_reward: str = ''  # Free text, e.g. "2" or "1:2"; never validated
    notes: str = ''
    screenshots: dict = field(default_factory=dict)  # Timeframe -> data URL

    @classmethod
    def from_dict(cls, data, trade_id=None):
        """Build a record from form fields or a decoded blob entry.

        Keys follow the stored layout (``riskReward`` for the ratio). The id
        is taken from ``trade_id``, then ``data['id']``, and generated when
        neither is set.
        """
        if not isinstance(data, dict):
            raise ValidationError(f'Invalid trade entry: {data!r}')
        missing = [name for name in REQUIRED_FIELDS if not data.get(name)]
        if missing:
            raise ValidationError('Please fill in all required fields', missing=missing)

        values = {name: _parse_enum(enum_cls, name, data.get(name))
                  for name, enum_cls in ENUM_FIELDS.items()}

        return cls(
            id=trade_id or data.get('id') or new_trade_id(),
            date=_parse_date(data['date']),
            risk_reward=str(data.get('riskReward') or ''),
            notes=str(data.get('notes') or ''),
            screenshots=_parse_screenshots(data.get('screenshots')),
            **values,
        )

    def to_dict(self):
        data = asdict(self)
        data['date'] = self.date.isoformat()
        data['riskReward'] = data.pop('risk_reward')
        for name in ENUM_FIELDS:
            data[name] = data[name].value if data[name] is not None else ''
        data['screenshots'] = {tf.value: payload for tf, payload in self.screenshots.items()}
        return data


def new_trade_id():
    return uuid.uuid4().hex


class JournalBlob(db.Model):
    __tablename__ = 'journal_blobs'

    key = db.Column(db.String, primary_key=True)  # Fixed storage key, e.g. "forexTrades"
    value = db.Column(db.Text, nullable=False)  # JSON array holding the whole record list
