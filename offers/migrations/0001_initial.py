import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Offer",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("title", models.CharField(max_length=200)),
                ("property", models.CharField(choices=[("limuru", "Limuru Country Home"), ("kanamai", "Kanamai Beach Resort"), ("kisumu", "Kisumu Hotel")], max_length=20)),
                ("category", models.CharField(choices=[("accommodation", "Accommodation"), ("conference", "Conference"), ("church", "Church Groups"), ("family", "Family"), ("honeymoon", "Honeymoon"), ("beach", "Beach"), ("weekend", "Weekend Getaway"), ("seasonal", "Seasonal")], max_length=20)),
                ("description", models.TextField()),
                ("original_price", models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ("current_price", models.DecimalField(decimal_places=2, max_digits=12)),
                ("discount_percentage", models.IntegerField(blank=True, editable=False, null=True)),
                ("offer_code", models.CharField(blank=True, max_length=50)),
                ("image_url", models.URLField(blank=True, max_length=500)),
                ("terms_conditions", models.TextField(blank=True)),
                ("features", models.JSONField(blank=True, default=list)),
                ("is_active", models.BooleanField(default=True)),
                ("featured", models.BooleanField(default=False)),
                ("start_date", models.DateField(blank=True, null=True)),
                ("end_date", models.DateField(blank=True, null=True)),
                ("views", models.PositiveIntegerField(default=0)),
                ("bookings", models.PositiveIntegerField(default=0)),
                ("created_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="offers_created", to=settings.AUTH_USER_MODEL)),
                ("updated_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="offers_updated", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-created_at", "-id"],
            },
        ),
    ]
