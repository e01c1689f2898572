from decimal import Decimal

import django.core.validators
from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("inventory", "0001_initial"),
    ]

    operations = [
        migrations.AddField(
            model_name="goodsdispatchitem",
            name="unit_rate",
            field=models.DecimalField(
                blank=True,
                decimal_places=2,
                help_text="Selling price per unit; billed at unit_cost when empty",
                max_digits=12,
                null=True,
                validators=[django.core.validators.MinValueValidator(Decimal("0.00"))],
            ),
        ),
        migrations.AddField(
            model_name="goodsdispatchitem",
            name="gst_rate",
            field=models.DecimalField(
                blank=True,
                decimal_places=2,
                help_text="Product GST rate; the company default applies when empty",
                max_digits=5,
                null=True,
                validators=[django.core.validators.MinValueValidator(Decimal("0.00"))],
            ),
        ),
    ]
