"""Personal Finance Tracker package.

Single-user ledger of income, expense, saving and extra-cash transactions
with savings goals. ``api_server.py`` exposes the HTTP API, ``app.py`` the
Streamlit dashboard and ``seed_db.py`` creates and seeds the database.
"""
