"""
Django app configuration for AgencyBrain core (agencies, people, sessions).
"""

from django.apps import AppConfig


class CoreConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "agencybrain.core"
    label = "core"
    verbose_name = "AgencyBrain Core"
