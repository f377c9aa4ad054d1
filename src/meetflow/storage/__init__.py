"""Rule persistence: SQLAlchemy schema, engine helpers, repositories."""
