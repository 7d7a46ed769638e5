"""Django app configuration for the 8-week Sales Experience program."""

from django.apps import AppConfig


class SalesExperienceConfig(AppConfig):
    """Configuration for the sales_experience app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "agencybrain.sales_experience"
    label = "sales_experience"
    verbose_name = "Sales Experience"
