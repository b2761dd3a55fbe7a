#!/usr/bin/env python3
"""
Migration: Create answer_quality_metrics table

Adds the one-row-per-answer quality metrics table. The unique constraint on
answer_id is the conflict target of the recompute upsert, and the foreign key
cascades so deleting an answer deletes its metrics.

Date: 2026-10-16
"""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from sqlalchemy import create_engine, text
from database.database import DATABASE_URL


def migrate():
    """Create answer_quality_metrics and its indexes."""
    engine = create_engine(DATABASE_URL)

    with engine.connect() as conn:
        # Check if table already exists
        result = conn.execute(text("""
            SELECT table_name
            FROM information_schema.tables
            WHERE table_name = 'answer_quality_metrics'
        """))

        if result.fetchone():
            print("Table 'answer_quality_metrics' already exists. Skipping migration.")
            return

        conn.execute(text("""
            CREATE TABLE answer_quality_metrics (
                id UUID PRIMARY KEY,
                answer_id UUID NOT NULL UNIQUE REFERENCES answer(id) ON DELETE CASCADE,
                aqs NUMERIC(5, 2) NOT NULL CHECK (aqs >= 0 AND aqs <= 100),
                label TEXT NOT NULL CHECK (label IN ('LOW', 'NORMAL', 'HIGH')),
                content_score NUMERIC(5, 2) NOT NULL,
                behavior_score NUMERIC(5, 2) NOT NULL,
                expert_score NUMERIC(5, 2) NOT NULL,
                trust_score NUMERIC(5, 2) NOT NULL,
                signals JSONB NOT NULL DEFAULT '{}'::jsonb,
                computed_at TIMESTAMPTZ NOT NULL DEFAULT now(),
                computed_by TEXT NOT NULL CHECK (computed_by IN ('SYSTEM', 'CRON', 'ADMIN')),
                engine_version TEXT NOT NULL
            )
        """))

        # Indexes for staleness scans and label filters
        conn.execute(text("""
            CREATE INDEX idx_aqm_computed_at ON answer_quality_metrics (computed_at)
        """))
        conn.execute(text("""
            CREATE INDEX idx_aqm_label ON answer_quality_metrics (label)
        """))

        conn.commit()
        print("Successfully created 'answer_quality_metrics' table")
        print("Successfully created indexes 'idx_aqm_computed_at', 'idx_aqm_label'")


def rollback():
    """Drop answer_quality_metrics."""
    engine = create_engine(DATABASE_URL)

    with engine.connect() as conn:
        conn.execute(text("""
            DROP TABLE IF EXISTS answer_quality_metrics
        """))

        conn.commit()
        print("Successfully dropped 'answer_quality_metrics' table")


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Migration for creating answer_quality_metrics")
    parser.add_argument("--rollback", action="store_true", help="Rollback the migration")

    args = parser.parse_args()

    if args.rollback:
        rollback()
    else:
        migrate()
