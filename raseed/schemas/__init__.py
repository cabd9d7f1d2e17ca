"""
Pydantic schemas for persisted records, model contracts and bus events.

Records are stored as `model_dump(mode="json")` and read back with
`model_validate`, so enums and datetimes round-trip as plain strings.
"""
