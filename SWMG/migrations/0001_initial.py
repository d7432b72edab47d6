import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Courses',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('CourseName', models.CharField(max_length=128)),
                ('Par', models.IntegerField()),
                ('CourseRating', models.DecimalField(decimal_places=1, max_digits=4)),
                ('SlopeRating', models.IntegerField()),
                ('CreateDate', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'db_table': 'Courses',
            },
        ),
        migrations.CreateModel(
            name='Players',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('Name', models.CharField(max_length=128)),
                ('Email', models.CharField(blank=True, max_length=256, null=True)),
                ('Index', models.DecimalField(blank=True, decimal_places=1, max_digits=3, null=True)),
                ('CreateDate', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'db_table': 'Players',
            },
        ),
        migrations.CreateModel(
            name='CourseHoles',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('HoleNumber', models.IntegerField(validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(18)])),
                ('Par', models.IntegerField(validators=[django.core.validators.MinValueValidator(3), django.core.validators.MaxValueValidator(6)])),
                ('StrokeIndex', models.IntegerField(validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(18)])),
                ('Course', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='holes', to='SWMG.courses')),
            ],
            options={
                'db_table': 'CourseHoles',
            },
        ),
        migrations.CreateModel(
            name='Tournaments',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('Name', models.CharField(max_length=128)),
                ('PlayDate', models.DateField()),
                ('Holes', models.IntegerField(default=18)),
                ('NetAllowance', models.IntegerField(default=100, validators=[django.core.validators.MinValueValidator(0), django.core.validators.MaxValueValidator(100)])),
                ('PotAmount', models.IntegerField(blank=True, null=True)),
                ('ParticipantsForSkins', models.IntegerField(blank=True, null=True)),
                ('IsFinal', models.BooleanField(default=False)),
                ('FinalizedAt', models.DateTimeField(blank=True, null=True)),
                ('CreateDate', models.DateTimeField(auto_now_add=True)),
                ('AlterDate', models.DateTimeField(auto_now=True)),
                ('Course', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, to='SWMG.courses')),
            ],
            options={
                'db_table': 'Tournaments',
            },
        ),
        migrations.CreateModel(
            name='Groups',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('GroupName', models.CharField(max_length=64)),
                ('TeeTime', models.DateTimeField(blank=True, null=True)),
                ('Tournament', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='groups', to='SWMG.tournaments')),
            ],
            options={
                'db_table': 'Groups',
            },
        ),
        migrations.CreateModel(
            name='Entries',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('CourseHandicap', models.IntegerField(blank=True, null=True)),
                ('PlayingCH', models.IntegerField(blank=True, null=True)),
                ('HasPaid', models.BooleanField(default=False)),
                ('CreateDate', models.DateTimeField(auto_now_add=True)),
                ('Group', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='entries', to='SWMG.groups')),
                ('Player', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to='SWMG.players')),
                ('Tournament', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='entries', to='SWMG.tournaments')),
            ],
            options={
                'db_table': 'Entries',
            },
        ),
        migrations.CreateModel(
            name='HoleScore',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('HoleNumber', models.IntegerField(validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(18)])),
                ('Strokes', models.IntegerField(validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(15)])),
                ('ClientUpdatedAt', models.DateTimeField(blank=True, null=True)),
                ('UpdatedAt', models.DateTimeField()),
                ('CreateDate', models.DateTimeField(auto_now_add=True)),
                ('Entry', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='scores', to='SWMG.entries')),
            ],
            options={
                'db_table': 'HoleScore',
            },
        ),
        migrations.CreateModel(
            name='ScoreConflict',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('HoleNumber', models.IntegerField()),
                ('IncomingStrokes', models.IntegerField()),
                ('IncomingAt', models.DateTimeField()),
                ('StoredStrokes', models.IntegerField()),
                ('StoredAt', models.DateTimeField()),
                ('CreateDate', models.DateTimeField(auto_now_add=True)),
                ('Resolved', models.BooleanField(default=False)),
                ('Resolution', models.CharField(blank=True, choices=[('apply-server', 'Apply server value'), ('force-local', 'Force local value'), ('cleared', 'Cleared')], max_length=16, null=True)),
                ('FinalStrokes', models.IntegerField(blank=True, null=True)),
                ('ResolvedAt', models.DateTimeField(blank=True, null=True)),
                ('Entry', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to='SWMG.entries')),
                ('Tournament', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='conflicts', to='SWMG.tournaments')),
            ],
            options={
                'db_table': 'ScoreConflict',
            },
        ),
        migrations.AddConstraint(
            model_name='courseholes',
            constraint=models.UniqueConstraint(fields=('Course', 'HoleNumber'), name='course_hole_unique'),
        ),
        migrations.AddConstraint(
            model_name='courseholes',
            constraint=models.UniqueConstraint(fields=('Course', 'StrokeIndex'), name='course_stroke_index_unique'),
        ),
        migrations.AddConstraint(
            model_name='entries',
            constraint=models.UniqueConstraint(fields=('Tournament', 'Player'), name='entry_player_unique'),
        ),
        migrations.AddConstraint(
            model_name='holescore',
            constraint=models.UniqueConstraint(fields=('Entry', 'HoleNumber'), name='entry_hole_unique'),
        ),
        migrations.AddIndex(
            model_name='scoreconflict',
            index=models.Index(fields=['Tournament', 'Resolved'], name='conflict_pending_idx'),
        ),
    ]
