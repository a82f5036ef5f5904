# migrate_db.py
"""
Legacy result migration
Adds columns missing from older exam_result tables and rewrites every stored
breakdown into the canonical field names (marks_awarded / marks_possible /
correct). Safe to run repeatedly.
"""
import logging

from sqlalchemy import inspect

from gradecore import create_app
from gradecore.extensions import db
from gradecore.models import ExamResult
from gradecore.services import normalize_breakdown

log = logging.getLogger(__name__)

# column name, SQL type, default
RESULT_COLUMNS = [
    ('pass_mark_percentage', 'FLOAT', '50'),
    ('updated_at', 'TIMESTAMP', None),
]


def add_missing_columns():
    """ALTER exam_result for columns older deployments lack"""
    columns = {c['name'] for c in inspect(db.session.connection()).get_columns('exam_result')}
    added = []

    for col_name, col_type, default_val in RESULT_COLUMNS:
        if col_name in columns:
            continue
        if default_val:
            query = f'ALTER TABLE exam_result ADD COLUMN {col_name} {col_type} DEFAULT {default_val}'
        else:
            query = f'ALTER TABLE exam_result ADD COLUMN {col_name} {col_type}'
        db.session.execute(db.text(query))
        added.append(col_name)
        log.info("Added exam_result.%s", col_name)

    return added


def normalize_stored_breakdowns():
    """Rewrite legacy-shaped breakdown entries; returns number of rows changed"""
    updated = 0
    for result in ExamResult.query.order_by(ExamResult.id).all():
        canonical = [entry.to_dict() for entry in normalize_breakdown(result.breakdown)]
        if canonical != result.breakdown:
            result.breakdown = canonical
            updated += 1
    return updated


def migrate_database(app=None):
    """Run the migration inside one transaction"""
    app = app or create_app()

    with app.app_context():
        log.info("=" * 50)
        log.info("RESULT MIGRATION")
        log.info("=" * 50)

        try:
            added = add_missing_columns()
            updated = normalize_stored_breakdowns()
            db.session.commit()
        except Exception:
            db.session.rollback()
            log.exception("MIGRATION FAILED")
            raise

        log.info("Migration completed: %d column(s) added, %d breakdown(s) normalized", len(added), updated)
        return {'columns_added': added, 'breakdowns_normalized': updated}


if __name__ == '__main__':
    migrate_database()
