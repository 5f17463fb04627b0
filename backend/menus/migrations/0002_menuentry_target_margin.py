from django.db import migrations, models


def pin_menu_targets(apps, schema_editor):
    Menu = apps.get_model('menus', 'Menu')
    MenuEntry = apps.get_model('menus', 'MenuEntry')
    for menu in Menu.objects.all():
        MenuEntry.objects.filter(menu=menu, target_margin__isnull=True).update(target_margin=menu.target_margin)


class Migration(migrations.Migration):

    dependencies = [
        ('menus', '0001_initial'),
    ]

    operations = [
        migrations.AddField(
            model_name='menuentry',
            name='target_margin',
            field=models.DecimalField(
                blank=True,
                decimal_places=2,
                editable=False,
                help_text='Target the suggested price is computed at; empty follows the menu',
                max_digits=5,
                null=True,
            ),
        ),
        migrations.RunPython(pin_menu_targets, migrations.RunPython.noop),
    ]
