# tests/test_app.py
import io
import json

from app import create_app
from models import JournalBlob, db

TRADE_FORM = {
    'date': '2024-01-15',
    'pair': 'EUR/USD',
    'session': 'London',
    'type': 'long',
    'setup': 'PT-POF',
    'h4': 'pro',
    'm15': 'flip refined',
    'entry': '1st tap',
    'result': 'win',
    'riskReward': '2',
    'notes': 'clean entry',
}


def test_index_renders_empty_journal(client):
    response = client.get('/')

    assert response.status_code == 200
    assert b'No trades recorded yet' in response.data


def test_create_trade(client, app):
    response = client.post('/trades', data=TRADE_FORM, follow_redirects=True)

    assert response.status_code == 200
    assert b'Trade added successfully!' in response.data
    trades = client.get('/api/trades').get_json()
    assert len(trades) == 1
    assert trades[0]['pair'] == 'EUR/USD'
    assert trades[0]['notes'] == 'clean entry'


def test_missing_required_fields_store_nothing(client):
    form = dict(TRADE_FORM, result='')

    response = client.post('/trades', data=form, follow_redirects=True)

    assert b'Please fill in all required fields' in response.data
    assert client.get('/api/trades').get_json() == []


def test_unknown_pair_is_rejected(client):
    response = client.post('/trades', data=dict(TRADE_FORM, pair='BTC/USD'), follow_redirects=True)

    assert b'Invalid pair' in response.data
    assert client.get('/api/trades').get_json() == []


def test_screenshot_upload_becomes_data_url(client):
    form = dict(TRADE_FORM)
    form['screenshot_h4'] = (io.BytesIO(b'\x89PNG'), 'h4.png', 'image/png')
    form['screenshot_m1'] = (io.BytesIO(b''), '')

    client.post('/trades', data=form, content_type='multipart/form-data')

    screenshots = client.get('/api/trades').get_json()[0]['screenshots']
    assert screenshots == {'h4': 'data:image/png;base64,iVBORw=='}


def test_delete_trade(client):
    client.post('/trades', data=TRADE_FORM)
    client.post('/trades', data=dict(TRADE_FORM, result='loss'))
    first, second = client.get('/api/trades').get_json()

    response = client.post(f"/trades/{first['id']}/delete", follow_redirects=True)

    assert b'Trade deleted' in response.data
    assert client.get('/api/trades').get_json() == [second]
    assert client.get('/api/analytics').get_json()['total_trades'] == 1


def test_delete_unknown_trade(client):
    response = client.post('/trades/missing/delete', follow_redirects=True)

    assert b'Trade not found' in response.data


def test_analytics_endpoint(client):
    client.post('/trades', data=TRADE_FORM)
    client.post('/trades', data=dict(TRADE_FORM, result='loss', riskReward='abc'))

    data = client.get('/api/analytics').get_json()

    assert data['total_trades'] == 2
    assert data['wins'] == 1
    assert data['win_rate'] == 50.0
    assert data['avg_risk_reward'] == 1.0
    assert [p['key'] for p in data['pair_stats']] == ['EUR/USD']
    assert len(data['setup_stats']) == 4


def test_journal_survives_restart(client, db_uri):
    client.post('/trades', data=TRADE_FORM)

    restarted = create_app({'TESTING': True, 'SQLALCHEMY_DATABASE_URI': db_uri})

    trades = restarted.test_client().get('/api/trades').get_json()
    assert [t['date'] for t in trades] == ['2024-01-15']


def test_recent_trades_limit(db_uri):
    app = create_app({'TESTING': True, 'SQLALCHEMY_DATABASE_URI': db_uri, 'JOURNAL_RECENT_LIMIT': 1})
    client = app.test_client()
    client.post('/trades', data=dict(TRADE_FORM, notes='first'))
    client.post('/trades', data=dict(TRADE_FORM, pair='USD/JPY'))

    page = client.get('/').data

    assert page.count(b'value="Delete"') == 1
    assert b'2 trades' in page


def test_corrupt_stored_entries_do_not_block_startup(client, db_uri):
    client.post('/trades', data=TRADE_FORM)
    with client.application.app_context():
        blob = db.session.get(JournalBlob, 'forexTrades')
        entries = json.loads(blob.value)
        blob.value = json.dumps(entries + ["garbage"])
        db.session.commit()

    restarted = create_app({'TESTING': True, 'SQLALCHEMY_DATABASE_URI': db_uri})

    assert len(restarted.test_client().get('/api/trades').get_json()) == 1
