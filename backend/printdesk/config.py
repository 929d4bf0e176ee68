# backend/printdesk/config.py
from __future__ import annotations
import os
from decimal import Decimal


class Config:
    # SQLite DB stored in backend/instance/printdesk.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///printdesk.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Fixed price charged per printed paper on printer-service transactions
    PRINTER_PAPER_RATE = Decimal(os.environ.get("PRINTER_PAPER_RATE", "500"))

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Attempts per store round-trip before a lock conflict is surfaced
    STORE_RETRY_ATTEMPTS = int(os.environ.get("STORE_RETRY_ATTEMPTS", "3"))
