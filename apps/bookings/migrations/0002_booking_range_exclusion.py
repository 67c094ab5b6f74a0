"""Database-level guard against overlapping bookings on PostgreSQL.

Other backends rely on the per-vehicle row lock taken by the booking
repository; this migration is a no-op for them.
"""

from django.db import migrations

CONSTRAINT_NAME = "booking_no_overlapping_ranges"


def add_exclusion(apps, schema_editor):
    if schema_editor.connection.vendor != "postgresql":
        return
    table = apps.get_model("bookings", "Booking")._meta.db_table
    schema_editor.execute("CREATE EXTENSION IF NOT EXISTS btree_gist")
    schema_editor.execute(
        f"ALTER TABLE {schema_editor.quote_name(table)} "
        f"ADD CONSTRAINT {CONSTRAINT_NAME} EXCLUDE USING gist ("
        "vehicle_id WITH =, daterange(start_date, end_date, '[)') WITH &&"
        ") WHERE (status <> 'cancelled')"
    )


def drop_exclusion(apps, schema_editor):
    if schema_editor.connection.vendor != "postgresql":
        return
    table = apps.get_model("bookings", "Booking")._meta.db_table
    schema_editor.execute(
        f"ALTER TABLE {schema_editor.quote_name(table)} DROP CONSTRAINT IF EXISTS {CONSTRAINT_NAME}"
    )


class Migration(migrations.Migration):

    dependencies = [
        ("bookings", "0001_initial"),
    ]

    operations = [
        migrations.RunPython(add_exclusion, drop_exclusion),
    ]
