"""
Journey Map Platform
Model package.

    db        — Flask-SQLAlchemy handle (snapshot storage table only)
    entities  — immutable AppState snapshot types consumed by the core
"""

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()
