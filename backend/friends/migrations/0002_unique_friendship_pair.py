import django.db.models.functions.comparison
from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ('friends', '0001_initial'),
    ]

    operations = [
        migrations.AddConstraint(
            model_name='friendship',
            constraint=models.UniqueConstraint(
                django.db.models.functions.comparison.Least('user', 'friend'),
                django.db.models.functions.comparison.Greatest('user', 'friend'),
                name='unique_friendship_pair',
            ),
        ),
    ]
