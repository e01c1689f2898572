import uuid
from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("companies", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="GoodsDispatch",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("dispatch_number", models.CharField(max_length=50)),
                ("dispatch_date", models.DateField()),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("company", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="dispatches", to="companies.company")),
                ("customer", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name="dispatches", to="companies.customer")),
            ],
            options={
                "ordering": ["-dispatch_date", "-created_at"],
            },
        ),
        migrations.CreateModel(
            name="GoodsDispatchItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("product_reference", models.CharField(max_length=100)),
                ("description", models.CharField(blank=True, default="", max_length=255)),
                ("quantity", models.DecimalField(decimal_places=3, max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal("0.001"))])),
                ("unit_cost", models.DecimalField(decimal_places=2, default=Decimal("0.00"), help_text="Cost price per unit at dispatch time", max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal("0.00"))])),
                ("dispatch", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="items", to="inventory.goodsdispatch")),
            ],
            options={
                "ordering": ["id"],
            },
        ),
        migrations.AddConstraint(
            model_name="goodsdispatch",
            constraint=models.UniqueConstraint(fields=("company", "dispatch_number"), name="uniq_dispatch_number_per_company"),
        ),
    ]
