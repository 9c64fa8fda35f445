"""
Reconcile duplicate users, then enforce one record per identity token.

Duplicates come from the old non-atomic check-then-insert path. For every
token with more than one record the most recently created one is kept.
"""

from django.db import migrations, models
from django.db.models import Count


def reconcile_duplicate_users(apps, schema_editor):
    User = apps.get_model("users", "User")

    duplicated_tokens = (
        User.objects.values("token_identifier")
        .annotate(record_count=Count("id"))
        .filter(record_count__gt=1)
        .values_list("token_identifier", flat=True)
    )

    for token_identifier in list(duplicated_tokens):
        records = list(
            User.objects.filter(token_identifier=token_identifier).order_by(
                "-created_at", "-id"
            )
        )
        User.objects.filter(id__in=[record.id for record in records[1:]]).delete()


class Migration(migrations.Migration):

    dependencies = [
        ("users", "0001_initial"),
    ]

    operations = [
        migrations.RunPython(reconcile_duplicate_users, migrations.RunPython.noop),
        migrations.AddConstraint(
            model_name="user",
            constraint=models.UniqueConstraint(
                fields=("token_identifier",),
                name="unique_user_token_identifier",
            ),
        ),
    ]
