# Dashboard.py

import dash
from dash import dcc, html
import plotly.graph_objs as go
from dash.dependencies import Input, Output

WIN_COLOR = '#10B981'
LOSS_COLOR = '#EF4444'


def period_figure(periods, title, axis_title):
    """Grouped wins/losses bars, one group per period in snapshot order."""
    labels = [p.label for p in periods]
    data = [
        go.Bar(x=labels, y=[p.wins for p in periods], name='Wins', marker={'color': WIN_COLOR}),
        go.Bar(x=labels, y=[p.losses for p in periods], name='Losses', marker={'color': LOSS_COLOR}),
    ]
    layout = go.Layout(
        title=title,
        barmode='group',
        # Keep first-appearance order instead of letting plotly sort the axis
        xaxis={'title': axis_title, 'type': 'category', 'categoryorder': 'array', 'categoryarray': labels},
        yaxis={'title': 'Trades'}
    )
    return {'data': data, 'layout': layout}


def win_loss_figure(snapshot):
    trace = go.Pie(
        labels=['Wins', 'Losses'],
        values=[snapshot.wins, snapshot.losses],
        marker={'colors': [WIN_COLOR, LOSS_COLOR]},
        textinfo='label+percent'
    )
    layout = go.Layout(title="Win/Loss Distribution")
    return {'data': [trace], 'layout': layout}


def summary_cards(snapshot):
    cards = [
        (snapshot.total_trades, 'Total Trades'),
        (f'{snapshot.win_rate}%', 'Win Rate'),
        (f'{snapshot.avg_risk_reward:.2f}', 'Avg Risk/Reward'),
        (f'{snapshot.wins}W/{snapshot.losses}L', 'Wins/Losses'),
    ]
    return html.Div([
        html.Div([html.H2(str(value)), html.P(caption)], className='card')
        for value, caption in cards
    ], className='cards')


def stats_table(stats, key_title):
    header = html.Tr([html.Th(key_title), html.Th('Total'), html.Th('Wins'), html.Th('Win Rate')])
    rows = [
        html.Tr([html.Td(s.key), html.Td(s.total), html.Td(s.wins), html.Td(f'{s.win_rate}%')])
        for s in stats
    ]
    return html.Table([html.Thead(header), html.Tbody(rows)])


def render_analytics(snapshot):
    if snapshot.total_trades == 0:
        return html.P("Add some trades to see analytics")

    return html.Div([
        summary_cards(snapshot),
        dcc.Graph(id='monthly-graph', figure=period_figure(snapshot.monthly, "Monthly Performance", 'Month')),
        dcc.Graph(id='weekly-graph', figure=period_figure(snapshot.weekly, "Weekly Performance", 'Week of')),
        dcc.Graph(id='win-loss-graph', figure=win_loss_figure(snapshot)),
        html.H3("Setup Performance"),
        stats_table(snapshot.setup_stats, 'Setup'),
        html.H3("Pair Performance"),
        stats_table(snapshot.pair_stats, 'Pair'),
    ])


def init_dashboard(flask_app):
    # Create a Dash instance that is bound to the Flask server
    dash_app = dash.Dash(
        __name__,
        server=flask_app,
        url_base_pathname='/dash/'
    )

    dash_app.layout = html.Div([
        html.H1("Analytics & Metrics"),
        html.A("Back to journal", href='/'),
        html.Div(id='analytics-content'),
        dcc.Interval(
            id='interval-component',
            interval=5000,  # Update every 5000 milliseconds (5 seconds)
            n_intervals=0
        )
    ])

    @dash_app.callback(
        Output('analytics-content', 'children'),
        Input('interval-component', 'n_intervals')
    )
    def update_analytics(n_intervals):
        # Recomputed from the full journal on every refresh
        store = flask_app.extensions['trade_store']
        return render_analytics(store.snapshot())

    return dash_app
