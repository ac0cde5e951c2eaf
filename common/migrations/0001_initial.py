import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("booking", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="NotificationLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("event", models.CharField(choices=[("booking_created", "Booking Created"), ("payment_confirmed", "Payment Confirmed")], max_length=30)),
                ("recipient", models.EmailField(max_length=254)),
                ("template_id", models.CharField(blank=True, max_length=100)),
                ("channel", models.CharField(choices=[("emailjs", "EmailJS"), ("smtp", "SMTP")], max_length=10)),
                ("success", models.BooleanField(default=False)),
                ("response_meta", models.JSONField(blank=True, default=dict)),
                ("booking", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="notification_logs", to="booking.booking")),
            ],
            options={
                "ordering": ["-created_at", "-id"],
            },
        ),
    ]
