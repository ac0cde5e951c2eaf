from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("common", "0001_initial"),
    ]

    operations = [
        migrations.AlterField(
            model_name="notificationlog",
            name="event",
            field=models.CharField(choices=[("booking_created", "Booking Created"), ("payment_confirmed", "Payment Confirmed"), ("feedback_reply", "Feedback Reply")], max_length=30),
        ),
    ]
