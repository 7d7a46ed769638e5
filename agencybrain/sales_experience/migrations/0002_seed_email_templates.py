"""
Seed the email templates used by the reminder job and quiz notifications.
"""

from django.db import migrations

TEMPLATES = [
    {
        "template_key": "lesson_available",
        "template_name": "New Lesson Available",
        "subject_template": "New Sales Training Lesson: {{lesson_title}}",
        "body_template": (
            "<html><body style=\"font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;\">"
            "<h2>Hi {{staff_name}},</h2>"
            "<p>A new lesson is available in your 8-Week Sales Experience training!</p>"
            "<h3>{{lesson_title}}</h3>"
            "<p>Week {{week_number}} - {{day_name}}</p>"
            "<p><a href=\"{{lesson_url}}\">Start Lesson</a></p>"
            "<p>Keep up the great work!</p>"
            "</body></html>"
        ),
        "variables_available": ["staff_name", "lesson_title", "week_number", "day_name", "lesson_url"],
    },
    {
        "template_key": "quiz_completed",
        "template_name": "Quiz Completed Notification",
        "subject_template": "{{staff_name}} completed a quiz",
        "body_template": (
            "<html><body style=\"font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;\">"
            "<p><strong>{{staff_name}}</strong> completed the quiz for {{lesson_title}}.</p>"
            "<p><strong>Score:</strong> {{score}}%</p>"
            "{{#if feedback_ai}}<p>{{feedback_ai}}</p>{{/if}}"
            "</body></html>"
        ),
        "variables_available": ["staff_name", "lesson_title", "score", "feedback_ai"],
    },
    {
        "template_key": "quiz_result",
        "template_name": "Quiz Result for Staff",
        "subject_template": "Your quiz results: {{lesson_title}}",
        "body_template": (
            "<html><body style=\"font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;\">"
            "<p>Hi {{staff_name}},</p>"
            "<p>You scored <strong>{{score}}%</strong> on the quiz for \"{{lesson_title}}\".</p>"
            "<p>{{feedback_ai}}</p>"
            "</body></html>"
        ),
        "variables_available": ["staff_name", "lesson_title", "score", "feedback_ai"],
    },
]


def seed_templates(apps, schema_editor):
    EmailTemplate = apps.get_model("sales_experience", "EmailTemplate")
    for template in TEMPLATES:
        EmailTemplate.objects.update_or_create(
            template_key=template["template_key"],
            defaults={**template, "is_active": True},
        )


def remove_templates(apps, schema_editor):
    EmailTemplate = apps.get_model("sales_experience", "EmailTemplate")
    EmailTemplate.objects.filter(
        template_key__in=[t["template_key"] for t in TEMPLATES]
    ).delete()


class Migration(migrations.Migration):

    dependencies = [
        ("sales_experience", "0001_initial"),
    ]

    operations = [
        migrations.RunPython(seed_templates, remove_templates),
    ]
