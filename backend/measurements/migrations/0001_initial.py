"""
Initial migration for measurements app.

Creates the workspace-scoped Unit model. Standard units are seeded per
workspace when the workspace is created.
"""
from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('tenant', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Unit',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('code', models.CharField(
                    help_text="Short code for the unit, e.g., 'g', 'kg', 'ml', 'un'",
                    max_length=20,
                )),
                ('name', models.CharField(
                    help_text="Full name of the unit, e.g., 'gram', 'kilogram', 'liter'",
                    max_length=50,
                )),
                ('measurement_type', models.CharField(
                    choices=[
                        ('weight', 'Weight'),
                        ('volume', 'Volume'),
                        ('count', 'Count'),
                    ],
                    help_text='Measurement type of the unit: weight, volume, or count',
                    max_length=20,
                )),
                ('is_base', models.BooleanField(
                    default=False,
                    help_text='Base unit of its measurement type (conversion factor 1)',
                )),
                ('conversion_factor', models.DecimalField(
                    decimal_places=6,
                    default=Decimal('1'),
                    help_text='How many base units equal one of this unit',
                    max_digits=18,
                    validators=[django.core.validators.MinValueValidator(Decimal('0.000001'))],
                )),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('tenant', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='units',
                    to='tenant.tenant',
                )),
            ],
            options={
                'verbose_name': 'Unit',
                'verbose_name_plural': 'Units',
                'ordering': ['measurement_type', '-is_base', 'conversion_factor', 'code'],
            },
        ),
        migrations.AddIndex(
            model_name='unit',
            index=models.Index(fields=['tenant', 'measurement_type'], name='unit_tenant_type_idx'),
        ),
        migrations.AddConstraint(
            model_name='unit',
            constraint=models.UniqueConstraint(fields=('tenant', 'code'), name='unique_unit_code_per_tenant'),
        ),
        migrations.AddConstraint(
            model_name='unit',
            constraint=models.UniqueConstraint(
                condition=models.Q(('is_base', True)),
                fields=('tenant', 'measurement_type'),
                name='unique_base_unit_per_type',
            ),
        ),
    ]
