import uuid
from decimal import Decimal

import django.core.validators
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Tenant',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(help_text="Display name for the workspace (e.g., Joe's Pizza)", max_length=255)),
                ('slug', models.SlugField(help_text='URL-safe identifier used by the API (e.g., joes-pizza)', unique=True)),
                ('labor_cost_per_hour', models.DecimalField(
                    decimal_places=4,
                    default=Decimal('0'),
                    help_text='Hourly labor cost applied to recipe preparation time',
                    max_digits=12,
                    validators=[django.core.validators.MinValueValidator(Decimal('0'))],
                )),
                ('monthly_labor_hours', models.DecimalField(
                    decimal_places=2,
                    default=Decimal('0'),
                    help_text='Total labor hours per month (informational, used for overhead reports)',
                    max_digits=10,
                    validators=[django.core.validators.MinValueValidator(Decimal('0'))],
                )),
                ('is_active', models.BooleanField(default=True, help_text='Inactive tenants cannot access the system')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('members', models.ManyToManyField(
                    blank=True,
                    help_text="Users allowed to manage this workspace's costs",
                    related_name='workspaces',
                    to=settings.AUTH_USER_MODEL,
                )),
            ],
            options={
                'db_table': 'tenants',
                'ordering': ['name'],
            },
        ),
        migrations.AddIndex(
            model_name='tenant',
            index=models.Index(fields=['slug'], name='tenant_slug_idx'),
        ),
        migrations.AddIndex(
            model_name='tenant',
            index=models.Index(fields=['is_active'], name='tenant_active_idx'),
        ),
    ]
