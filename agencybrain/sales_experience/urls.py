"""
URL routes for the Sales Experience app.

Mounted under /api/ by the root URLconf. Staff-portal endpoints live under
staff/; the owner dashboard reads sales-experience/.
"""

from django.urls import path

from . import api_views

app_name = "sales_experience"

urlpatterns = [
    path(
        "staff/sales-lessons/",
        api_views.get_staff_sales_lessons,
        name="staff_sales_lessons",
    ),
    path(
        "staff/sales-lessons/progress/",
        api_views.update_lesson_progress,
        name="staff_lesson_progress",
    ),
    path(
        "staff/sales-lessons/quiz/",
        api_views.submit_sales_quiz,
        name="staff_sales_quiz",
    ),
    path(
        "sales-experience/",
        api_views.get_sales_experience,
        name="owner_sales_experience",
    ),
]
