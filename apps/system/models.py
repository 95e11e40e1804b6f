from django.conf import settings
from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models

from apps.invoices.models import Currency


def default_brokerage_rate():
    return settings.DEFAULT_BROKERAGE_RATE


class DateFormat(models.TextChoices):
    DMY = 'DD/MM/YYYY', 'DD/MM/YYYY'
    MDY = 'MM/DD/YYYY', 'MM/DD/YYYY'
    YMD = 'YYYY-MM-DD', 'YYYY-MM-DD'


class SystemSettings(models.Model):
    """
    Application-wide settings, stored as a single row (pk=1).

    Use ``SystemSettings.load()`` instead of querying directly.
    """

    company_name = models.CharField(max_length=200, default='BussNote')
    contact_email = models.EmailField(blank=True)
    default_currency = models.CharField(max_length=3, choices=Currency.choices, default=Currency.INR)
    date_format = models.CharField(max_length=10, choices=DateFormat.choices, default=DateFormat.DMY)
    auto_logout_minutes = models.PositiveIntegerField(
        default=30,
        validators=[MinValueValidator(5), MaxValueValidator(24 * 60)]
    )
    enable_notifications = models.BooleanField(default=True)
    default_brokerage_rate = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=default_brokerage_rate,
        validators=[MinValueValidator(0), MaxValueValidator(100)]
    )

    updated_at = models.DateTimeField(auto_now=True)
    updated_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+'
    )

    class Meta:
        db_table = 'system_settings'
        verbose_name = 'system settings'
        verbose_name_plural = 'system settings'

    def __str__(self):
        return self.company_name

    def save(self, *args, **kwargs):
        self.pk = 1
        super().save(*args, **kwargs)

    @classmethod
    def load(cls):
        settings_row, _ = cls.objects.get_or_create(pk=1)
        return settings_row
