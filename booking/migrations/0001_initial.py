import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


STATUS_CHOICES = [
    ("pending", "Pending"),
    ("confirmed", "Confirmed"),
    ("checked-in", "Checked In"),
    ("checked-out", "Checked Out"),
    ("cancelled", "Cancelled"),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Booking",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("booking_id", models.CharField(db_index=True, editable=False, max_length=32, unique=True)),
                ("first_name", models.CharField(max_length=100)),
                ("last_name", models.CharField(blank=True, max_length=100)),
                ("email", models.EmailField(max_length=254)),
                ("phone", models.CharField(blank=True, max_length=32)),
                ("resort", models.CharField(choices=[("limuru", "Limuru Country Home"), ("kanamai", "Kanamai Beach Resort"), ("kisumu", "Kisumu Hotel")], default="limuru", max_length=20)),
                ("room_type", models.CharField(max_length=50)),
                ("package_type", models.CharField(choices=[("bnb", "Bed & Breakfast"), ("hb", "Half Board"), ("fb", "Full Board"), ("conference", "Conference")], default="bnb", max_length=20)),
                ("adults", models.PositiveIntegerField(default=1)),
                ("children", models.PositiveIntegerField(default=0)),
                ("rooms", models.PositiveIntegerField(default=1)),
                ("check_in", models.DateField()),
                ("check_out", models.DateField()),
                ("nights", models.PositiveIntegerField(default=1)),
                ("special_requests", models.TextField(blank=True)),
                ("total_amount", models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ("currency", models.CharField(default="KES", editable=False, max_length=3)),
                ("payment_method", models.CharField(choices=[("mpesa", "M-Pesa"), ("cash", "Cash"), ("card", "Card"), ("bank", "Bank Transfer")], default="mpesa", max_length=20)),
                ("payment_status", models.CharField(choices=[("pending", "Pending"), ("awaiting_payment", "Awaiting Payment"), ("paid", "Paid"), ("failed", "Failed"), ("refunded", "Refunded")], db_index=True, default="awaiting_payment", max_length=20)),
                ("mpesa_receipt", models.CharField(blank=True, max_length=32)),
                ("payment_completed_at", models.DateTimeField(blank=True, null=True)),
                ("payment_failure_reason", models.CharField(blank=True, max_length=255)),
                ("status", models.CharField(choices=STATUS_CHOICES, db_index=True, default="pending", max_length=16)),
                ("source", models.CharField(choices=[("web", "Website"), ("admin", "Admin Panel")], default="web", max_length=10)),
                ("checked_in_at", models.DateTimeField(blank=True, null=True)),
                ("checked_out_at", models.DateTimeField(blank=True, null=True)),
                ("created_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="bookings_created", to=settings.AUTH_USER_MODEL)),
                ("updated_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="bookings_updated", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["resort", "check_in"], name="booking_resort_checkin_idx"),
                    models.Index(fields=["updated_at"], name="booking_updated_at_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="BookingStatusHistory",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("old_status", models.CharField(blank=True, choices=STATUS_CHOICES, max_length=16)),
                ("new_status", models.CharField(choices=STATUS_CHOICES, max_length=16)),
                ("action", models.CharField(choices=[("CREATE", "Create"), ("CONFIRM", "Confirm"), ("CHECK_IN", "Check In"), ("CHECK_OUT", "Check Out"), ("CANCEL", "Cancel"), ("PAYMENT", "Payment"), ("MANUAL_UPDATE", "Manual Update")], default="MANUAL_UPDATE", max_length=20)),
                ("reason", models.TextField(blank=True)),
                ("booking", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="status_history", to="booking.booking")),
                ("changed_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="booking_status_changes", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-created_at", "-id"],
            },
        ),
    ]
