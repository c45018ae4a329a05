"""
Database module for Seminar Registration

Contains startup seeding of the default admin and configuration records.
"""
from seminar.db.seed_data import seed_defaults, seed_all

__all__ = ["seed_defaults", "seed_all"]
