from decimal import Decimal

from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("invoices", "0001_initial"),
    ]

    operations = [
        migrations.AlterField(
            model_name="invoiceitem",
            name="cgst_rate",
            field=models.DecimalField(decimal_places=3, default=Decimal("0.000"), max_digits=6),
        ),
        migrations.AlterField(
            model_name="invoiceitem",
            name="sgst_rate",
            field=models.DecimalField(decimal_places=3, default=Decimal("0.000"), max_digits=6),
        ),
        migrations.AlterField(
            model_name="invoiceitem",
            name="igst_rate",
            field=models.DecimalField(decimal_places=3, default=Decimal("0.000"), max_digits=6),
        ),
    ]
