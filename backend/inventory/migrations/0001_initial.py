"""
Initial migration for inventory app.

Creates suppliers, ingredients with their variations and supplier entries,
recipes and recipe items.
"""
from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


POSITIVE = [django.core.validators.MinValueValidator(Decimal('0.000001'))]


def unit_fk(**kwargs):
    return models.ForeignKey(
        on_delete=django.db.models.deletion.PROTECT,
        related_name='+',
        to='measurements.unit',
        **kwargs
    )


def tenant_fk(related_name):
    return models.ForeignKey(
        on_delete=django.db.models.deletion.CASCADE,
        related_name=related_name,
        to='tenant.tenant',
    )


def derived_cost(**kwargs):
    return models.DecimalField(decimal_places=6, default=Decimal('0'), editable=False, max_digits=15, **kwargs)


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('tenant', '0001_initial'),
        ('measurements', '0001_initial'),
        ('products', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Supplier',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200)),
                ('contact', models.CharField(blank=True, max_length=200)),
                ('phone', models.CharField(blank=True, max_length=50)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('tenant', tenant_fk('suppliers')),
            ],
            options={
                'verbose_name': 'Supplier',
                'verbose_name_plural': 'Suppliers',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='Ingredient',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200)),
                ('unit_cost', derived_cost(help_text='Current cost per base unit, derived from supplier entries')),
                ('average_price', models.DecimalField(
                    decimal_places=4,
                    default=Decimal('0'),
                    editable=False,
                    help_text='Current cost per price unit, derived',
                    max_digits=15,
                )),
                ('is_priced', models.BooleanField(
                    default=False,
                    editable=False,
                    help_text='False while the ingredient has no supplier entries',
                )),
                ('available_for_sale', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('category', models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name='ingredients',
                    to='products.category',
                )),
                ('price_unit', unit_fk(help_text='Unit prices are displayed in; defines the measurement type')),
                ('tenant', tenant_fk('ingredients')),
            ],
            options={
                'verbose_name': 'Ingredient',
                'verbose_name_plural': 'Ingredients',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='IngredientVariation',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200)),
                ('input_quantity', models.DecimalField(decimal_places=6, max_digits=15, validators=POSITIVE)),
                ('output_quantity', models.DecimalField(decimal_places=6, max_digits=15, validators=POSITIVE)),
                ('yield_percentage', models.DecimalField(
                    decimal_places=4, default=Decimal('100'), editable=False, max_digits=9,
                )),
                ('unit_cost', derived_cost(help_text='Cost per base unit of the processed ingredient, derived')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('ingredient', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='variations',
                    to='inventory.ingredient',
                )),
                ('input_unit', unit_fk()),
                ('output_unit', unit_fk()),
                ('tenant', tenant_fk('ingredient_variations')),
            ],
            options={
                'verbose_name': 'Ingredient Variation',
                'verbose_name_plural': 'Ingredient Variations',
                'ordering': ['ingredient', 'name'],
            },
        ),
        migrations.CreateModel(
            name='SupplierEntry',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('quantity', models.DecimalField(decimal_places=6, max_digits=15, validators=POSITIVE)),
                ('total_price', models.DecimalField(
                    decimal_places=4,
                    max_digits=15,
                    validators=[django.core.validators.MinValueValidator(Decimal('0'))],
                )),
                ('date', models.DateField()),
                ('notes', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('ingredient', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='entries',
                    to='inventory.ingredient',
                )),
                ('supplier', models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name='entries',
                    to='inventory.supplier',
                )),
                ('unit', unit_fk()),
                ('tenant', tenant_fk('supplier_entries')),
            ],
            options={
                'verbose_name': 'Supplier Entry',
                'verbose_name_plural': 'Supplier Entries',
                'ordering': ['-date', '-created_at'],
            },
        ),
        migrations.CreateModel(
            name='Recipe',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200)),
                ('description', models.TextField(blank=True)),
                ('yield_quantity', models.DecimalField(
                    decimal_places=6, default=Decimal('1'), max_digits=15, validators=POSITIVE,
                )),
                ('prep_time_minutes', models.PositiveIntegerField(blank=True, null=True)),
                ('items_cost', derived_cost()),
                ('labor_cost', derived_cost()),
                ('total_cost', derived_cost()),
                ('cost_per_portion', derived_cost()),
                ('available_for_sale', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('tenant', tenant_fk('recipes')),
                ('yield_unit', unit_fk()),
            ],
            options={
                'verbose_name': 'Recipe',
                'verbose_name_plural': 'Recipes',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='RecipeItem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('component_type', models.CharField(
                    choices=[
                        ('ingredient', 'Ingredient'),
                        ('variation', 'Ingredient Variation'),
                        ('recipe', 'Recipe'),
                    ],
                    max_length=20,
                )),
                ('component_id', models.PositiveBigIntegerField()),
                ('quantity', models.DecimalField(decimal_places=6, max_digits=15, validators=POSITIVE)),
                ('sort_order', models.PositiveIntegerField(default=0)),
                ('recipe', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='items',
                    to='inventory.recipe',
                )),
                ('unit', unit_fk()),
            ],
            options={
                'verbose_name': 'Recipe Item',
                'verbose_name_plural': 'Recipe Items',
                'ordering': ['recipe', 'sort_order', 'id'],
            },
        ),
        migrations.AddIndex(
            model_name='supplierentry',
            index=models.Index(fields=['ingredient', '-date', '-created_at'], name='entry_latest_idx'),
        ),
        migrations.AddIndex(
            model_name='recipeitem',
            index=models.Index(fields=['component_type', 'component_id'], name='recipeitem_component_idx'),
        ),
    ]
