"""
Initial migration for menus app.

Creates menus with their entries and fees, and workspace fixed costs.
"""
from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


def derived_amount(**kwargs):
    return models.DecimalField(decimal_places=4, default=Decimal('0'), editable=False, max_digits=15, **kwargs)


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('tenant', '0001_initial'),
        ('products', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Menu',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200)),
                ('description', models.TextField(blank=True)),
                ('pricing_mode', models.CharField(
                    choices=[('margin', 'Margin on price'), ('markup', 'Markup on cost')],
                    default='margin',
                    max_length=10,
                )),
                ('target_margin', models.DecimalField(
                    decimal_places=2,
                    default=Decimal('30'),
                    help_text='Target margin (margin mode) or markup (markup mode), in percent',
                    max_digits=5,
                    validators=[
                        django.core.validators.MinValueValidator(Decimal('0')),
                        django.core.validators.MaxValueValidator(Decimal('99.99')),
                    ],
                )),
                ('apportionment_type', models.CharField(
                    choices=[
                        ('percentage_of_sale', 'Percentage of sale price'),
                        ('fixed_per_product', 'Fixed amount per product'),
                        ('proportional_to_sales', 'Monthly fixed costs / expected monthly sales'),
                    ],
                    default='proportional_to_sales',
                    help_text='How workspace fixed costs are spread over menu entries',
                    max_length=30,
                )),
                ('apportionment_value', models.DecimalField(
                    blank=True,
                    decimal_places=4,
                    help_text='Percent, amount or expected monthly sales volume depending on the type',
                    max_digits=15,
                    null=True,
                    validators=[django.core.validators.MinValueValidator(Decimal('0'))],
                )),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('tenant', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='menus',
                    to='tenant.tenant',
                )),
            ],
            options={
                'verbose_name': 'Menu',
                'verbose_name_plural': 'Menus',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='MenuEntry',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('item_type', models.CharField(
                    choices=[('product', 'Product'), ('ingredient', 'Ingredient'), ('recipe', 'Recipe')],
                    default='product',
                    max_length=20,
                )),
                ('item_id', models.PositiveBigIntegerField()),
                ('cost', derived_amount(help_text='Item cost (size-scaled), derived')),
                ('suggested_price', derived_amount()),
                ('override_price', models.DecimalField(
                    blank=True,
                    decimal_places=4,
                    max_digits=15,
                    null=True,
                    validators=[django.core.validators.MinValueValidator(Decimal('0'))],
                )),
                ('total_cost', derived_amount(
                    help_text='Cost plus fees and fixed-cost share at the effective price',
                )),
                ('margin_value', derived_amount()),
                ('margin_percentage', models.DecimalField(
                    decimal_places=4, default=Decimal('0'), editable=False, max_digits=9,
                )),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('menu', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='entries',
                    to='menus.menu',
                )),
                ('size_option', models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='menu_entries',
                    to='products.sizeoption',
                )),
            ],
            options={
                'verbose_name': 'Menu Entry',
                'verbose_name_plural': 'Menu Entries',
                'ordering': ['menu', 'id'],
            },
        ),
        migrations.CreateModel(
            name='MenuFee',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=100)),
                ('fee_type', models.CharField(
                    choices=[('fixed', 'Fixed amount'), ('percentage', 'Percentage of sale price')],
                    max_length=20,
                )),
                ('value', models.DecimalField(
                    decimal_places=4,
                    max_digits=15,
                    validators=[django.core.validators.MinValueValidator(Decimal('0'))],
                )),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('menu', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='fees',
                    to='menus.menu',
                )),
            ],
            options={
                'verbose_name': 'Menu Fee',
                'verbose_name_plural': 'Menu Fees',
                'ordering': ['menu', 'name'],
            },
        ),
        migrations.CreateModel(
            name='FixedCost',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200)),
                ('value', models.DecimalField(
                    decimal_places=4,
                    help_text='Monthly amount',
                    max_digits=15,
                    validators=[django.core.validators.MinValueValidator(Decimal('0'))],
                )),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('tenant', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='fixed_costs',
                    to='tenant.tenant',
                )),
            ],
            options={
                'verbose_name': 'Fixed Cost',
                'verbose_name_plural': 'Fixed Costs',
                'ordering': ['name'],
            },
        ),
        migrations.AddConstraint(
            model_name='menuentry',
            constraint=models.UniqueConstraint(
                fields=('menu', 'item_type', 'item_id', 'size_option'),
                name='unique_menu_item_size',
            ),
        ),
        migrations.AddIndex(
            model_name='menuentry',
            index=models.Index(fields=['item_type', 'item_id'], name='menuentry_item_idx'),
        ),
    ]
