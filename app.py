# In app.py

import base64
import logging
import os

from flask import Flask, current_app, flash, jsonify, redirect, render_template_string, request, url_for

from models import db, Pair, Session, TradeType, Setup, H4Bias, M15Poi, EntryType, Result, Timeframe
from models import TradeRecord, ValidationError
from store import DEFAULT_STORAGE_KEY, TradeStore, load_trades, save_trades
from Dashboard import init_dashboard

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s | %(name)s | %(levelname)-8s | %(message)s"

JOURNAL_TEMPLATE = '''
<!doctype html>
<html>
<head>
  <title>Forex Trading Journal</title>
  <style>
    body { font-family: sans-serif; background: #111827; color: #f9fafb; }
    .wrap { max-width: 1100px; margin: 0 auto; display: grid; grid-template-columns: 1fr 1fr; gap: 24px; }
    .card { background: #1f2937; border: 1px solid #374151; border-radius: 8px; padding: 16px; }
    .header, .stats { text-align: center; margin-bottom: 20px; }
    .stats span { display: inline-block; margin: 0 16px; font-size: 1.3em; }
    label { display: block; margin-top: 8px; color: #d1d5db; }
    input, select, textarea { width: 100%; }
    .flash { max-width: 1100px; margin: 0 auto 16px; padding: 8px; background: #374151; }
    .trade { background: #374151; padding: 10px; margin-bottom: 10px; border-radius: 6px; }
    .win { color: #10b981; }
    .loss { color: #ef4444; }
  </style>
</head>
<body>
  <div class="header">
    <h1>Advanced Forex Trading Journal</h1>
    <p><a href="/dash/">View Analytics Dashboard</a></p>
  </div>
  {% for message in get_flashed_messages() %}
    <div class="flash">{{ message }}</div>
  {% endfor %}
  <div class="stats">
    <span>{{ stats.total_trades }} trades</span>
    <span class="win">{{ stats.win_rate }}% win rate</span>
    <span>{{ "{:.2f}".format(stats.avg_risk_reward) }} avg RR</span>
    <span>{{ stats.wins }}W/{{ stats.losses }}L</span>
  </div>
  <div class="wrap">
    <div class="card">
      <h2>Add New Trade</h2>
      <form method="post" action="{{ url_for('create_trade') }}" enctype="multipart/form-data">
        <label for="date">Date</label>
        <input id="date" name="date" type="date" required>
        {% for name, title, options in selects %}
          <label for="{{ name }}">{{ title }}</label>
          <select id="{{ name }}" name="{{ name }}">
            <option value="">Select {{ title|lower }}</option>
            {% for option in options %}
              <option value="{{ option.value }}">{{ option.value }}</option>
            {% endfor %}
          </select>
        {% endfor %}
        <label for="riskReward">Risk/Reward</label>
        <input id="riskReward" name="riskReward" type="text" placeholder="e.g., 2">
        <label for="notes">Notes</label>
        <textarea id="notes" name="notes" rows="3" placeholder="Add any additional notes..."></textarea>
        {% for timeframe in timeframes %}
          <label for="screenshot_{{ timeframe.value }}">{{ timeframe.value }} screenshot</label>
          <input id="screenshot_{{ timeframe.value }}" name="screenshot_{{ timeframe.value }}" type="file" accept="image/*">
        {% endfor %}
        <p><input type="submit" value="Add Trade"></p>
      </form>
    </div>
    <div class="card">
      <h2>Recent Trades</h2>
      {% for trade in recent %}
        <div class="trade">
          <strong>{{ trade.pair.value }}</strong> {{ trade.type.value|upper }}
          <span class="{{ trade.result.value }}">{{ trade.result.value|upper }}</span>
          <div>{{ trade.date.isoformat() }} | {{ trade.setup.value if trade.setup else '-' }}
            | {{ trade.h4.value if trade.h4 else '-' }} | {{ trade.m15.value if trade.m15 else '-' }}</div>
          <div>{{ trade.entry.value if trade.entry else '-' }} | RR: {{ trade.risk_reward }}</div>
          {% for timeframe, payload in trade.screenshots.items() %}
            <a href="{{ payload }}" target="_blank">{{ timeframe.value }}</a>
          {% endfor %}
          <form method="post" action="{{ url_for('delete_trade', trade_id=trade.id) }}">
            <input type="submit" value="Delete">
          </form>
        </div>
      {% else %}
        <p>No trades recorded yet</p>
      {% endfor %}
    </div>
  </div>
</body>
</html>
'''

FORM_SELECTS = [
    ('pair', 'Pair', Pair),
    ('session', 'Session', Session),
    ('type', 'Type', TradeType),
    ('setup', 'Setup', Setup),
    ('h4', '4H - Pro/Counter', H4Bias),
    ('m15', '15m - POI', M15Poi),
    ('entry', 'Entry', EntryType),
    ('result', 'Result', Result),
]


def setup_logging(level="INFO"):
    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")


def get_store():
    return current_app.extensions['trade_store']


def to_data_url(file):
    """Encode an uploaded file as a data: URL."""
    payload = base64.b64encode(file.stream.read()).decode('ascii')
    mimetype = file.mimetype or 'application/octet-stream'
    return f'data:{mimetype};base64,{payload}'


def read_screenshots(files):
    screenshots = {}
    for timeframe in Timeframe:
        file = files.get(f'screenshot_{timeframe.value}')
        if file and file.filename:
            screenshots[timeframe.value] = to_data_url(file)
    return screenshots


def create_app(test_config=None):
    app = Flask(__name__)

    # Configure the SQLite database and a secret key for flash messages
    app.config['SQLALCHEMY_DATABASE_URI'] = os.getenv('JOURNAL_DATABASE_URI', 'sqlite:///journal.db')
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False
    app.config['SECRET_KEY'] = os.getenv('JOURNAL_SECRET_KEY', 'dev')
    app.config['JOURNAL_STORAGE_KEY'] = DEFAULT_STORAGE_KEY
    app.config['JOURNAL_RECENT_LIMIT'] = 5
    app.config['JOURNAL_LOG_LEVEL'] = os.getenv('JOURNAL_LOG_LEVEL', 'INFO')
    if test_config is not None:
        app.config.update(test_config)

    setup_logging(app.config['JOURNAL_LOG_LEVEL'])

    # Initialize the SQLAlchemy database with the Flask app
    db.init_app(app)

    # Create database tables and load the journal once at startup
    storage_key = app.config['JOURNAL_STORAGE_KEY']
    with app.app_context():
        db.create_all()
        records = load_trades(storage_key)

    app.extensions['trade_store'] = TradeStore(
        records, persist=lambda trades: save_trades(trades, storage_key))

    @app.route('/')
    def index():
        store = get_store()
        return render_template_string(
            JOURNAL_TEMPLATE,
            stats=store.snapshot(),
            recent=store.recent(app.config['JOURNAL_RECENT_LIMIT']),
            selects=FORM_SELECTS,
            timeframes=list(Timeframe),
        )

    @app.route('/trades', methods=['POST'])
    def create_trade():
        data = request.form.to_dict()
        data.pop('id', None)
        data['screenshots'] = read_screenshots(request.files)
        try:
            record = TradeRecord.from_dict(data)
        except ValidationError as e:
            logger.warning("Rejected trade submission: %s %s", e, e.missing)
            flash(str(e))
            return redirect(url_for('index'))
        get_store().append(record)
        flash('Trade added successfully!')
        return redirect(url_for('index'))

    @app.route('/trades/<trade_id>/delete', methods=['POST'])
    def delete_trade(trade_id):
        if get_store().remove(trade_id):
            flash('Trade deleted')
        else:
            flash('Trade not found')
        return redirect(url_for('index'))

    @app.route('/api/trades')
    def api_trades():
        return jsonify([record.to_dict() for record in get_store().list()])

    @app.route('/api/analytics')
    def api_analytics():
        return jsonify(get_store().snapshot().to_dict())

    # Mount the analytics dashboard on /dash/
    init_dashboard(app)

    return app


if __name__ == '__main__':
    app = create_app()
    app.run(debug=True)
