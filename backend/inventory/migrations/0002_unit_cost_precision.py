from decimal import Decimal

from django.db import migrations, models


def unit_cost(help_text):
    return models.DecimalField(
        decimal_places=12, default=Decimal('0'), editable=False, help_text=help_text, max_digits=24,
    )


class Migration(migrations.Migration):

    dependencies = [
        ('inventory', '0001_initial'),
    ]

    operations = [
        migrations.AlterField(
            model_name='ingredient',
            name='unit_cost',
            field=unit_cost('Current cost per base unit, derived from supplier entries'),
        ),
        migrations.AlterField(
            model_name='ingredientvariation',
            name='unit_cost',
            field=unit_cost('Cost per base unit of the processed ingredient, derived'),
        ),
    ]
