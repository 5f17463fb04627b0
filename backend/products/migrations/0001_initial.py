"""
Initial migration for products app.

Creates categories, size groups with their options, products and product
composition lines.
"""
from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('tenant', '0001_initial'),
        ('measurements', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Category',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=100)),
                ('description', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('tenant', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='categories',
                    to='tenant.tenant',
                )),
            ],
            options={
                'verbose_name': 'Category',
                'verbose_name_plural': 'Categories',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='SizeGroup',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=100)),
                ('description', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('tenant', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='size_groups',
                    to='tenant.tenant',
                )),
            ],
            options={
                'verbose_name': 'Size Group',
                'verbose_name_plural': 'Size Groups',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='SizeOption',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=50)),
                ('multiplier', models.DecimalField(
                    decimal_places=4,
                    default=Decimal('1'),
                    help_text='Cost and quantity multiplier relative to the reference size',
                    max_digits=10,
                    validators=[django.core.validators.MinValueValidator(Decimal('0.0001'))],
                )),
                ('is_reference', models.BooleanField(
                    default=False,
                    help_text='Reference size whose cost is computed from the product composition',
                )),
                ('sort_order', models.PositiveIntegerField(default=0)),
                ('group', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='options',
                    to='products.sizegroup',
                )),
            ],
            options={
                'verbose_name': 'Size Option',
                'verbose_name_plural': 'Size Options',
                'ordering': ['group', 'sort_order', 'id'],
            },
        ),
        migrations.CreateModel(
            name='Product',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200)),
                ('description', models.TextField(blank=True)),
                ('base_cost', models.DecimalField(
                    decimal_places=6,
                    default=Decimal('0'),
                    editable=False,
                    help_text='Cost of the product (reference size when sized), derived',
                    max_digits=15,
                )),
                ('available_for_sale', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('category', models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name='products',
                    to='products.category',
                )),
                ('size_group', models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name='products',
                    to='products.sizegroup',
                )),
                ('tenant', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='products',
                    to='tenant.tenant',
                )),
            ],
            options={
                'verbose_name': 'Product',
                'verbose_name_plural': 'Products',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='ProductComposition',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('component_type', models.CharField(
                    choices=[
                        ('product', 'Product'),
                        ('ingredient', 'Ingredient'),
                        ('variation', 'Ingredient Variation'),
                        ('recipe', 'Recipe'),
                    ],
                    max_length=20,
                )),
                ('component_id', models.PositiveBigIntegerField()),
                ('quantity', models.DecimalField(
                    decimal_places=6,
                    max_digits=15,
                    validators=[django.core.validators.MinValueValidator(Decimal('0.000001'))],
                )),
                ('calculated_cost', models.DecimalField(
                    decimal_places=6,
                    default=Decimal('0'),
                    editable=False,
                    max_digits=15,
                )),
                ('sort_order', models.PositiveIntegerField(default=0)),
                ('product', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='composition',
                    to='products.product',
                )),
                ('unit', models.ForeignKey(
                    blank=True,
                    help_text='Unit of the quantity; not used for nested products',
                    null=True,
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name='+',
                    to='measurements.unit',
                )),
            ],
            options={
                'verbose_name': 'Product Composition Line',
                'verbose_name_plural': 'Product Composition',
                'ordering': ['product', 'sort_order', 'id'],
            },
        ),
        migrations.AddConstraint(
            model_name='category',
            constraint=models.UniqueConstraint(fields=('tenant', 'name'), name='unique_category_name_per_tenant'),
        ),
        migrations.AddConstraint(
            model_name='sizeoption',
            constraint=models.UniqueConstraint(
                condition=models.Q(('is_reference', True)),
                fields=('group',),
                name='unique_reference_option_per_group',
            ),
        ),
        migrations.AddIndex(
            model_name='product',
            index=models.Index(fields=['tenant', 'size_group'], name='product_tenant_size_idx'),
        ),
        migrations.AddIndex(
            model_name='productcomposition',
            index=models.Index(fields=['component_type', 'component_id'], name='composition_component_idx'),
        ),
    ]
