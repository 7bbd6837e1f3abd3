"""
Branding Session Template
Personal brand and business content shoots
"""

from .shared_tasks import (
    get_consultation_call_task,
    get_contract_confirmed_task,
    get_editing_task,
    get_gallery_delivery_task,
    get_guide_task,
    get_session_day_task,
    task,
)


def get_branding_template():
    """Get the Branding Session timeline template"""
    return {
        "sessionType": "Branding Session",
        "templateName": "Branding Session Standard Timeline",
        "tasks": [
            get_contract_confirmed_task(),
            get_guide_task("Brand questionnaire sent & completed", -10, 2),
            get_guide_task(
                "Style guide & mood board creation",
                -7,
                3,
                estimated_hours=2.0,
                requires_human=True,
                can_batch=False,
            ),
            task("Location scouting & preparation", -5, 4, estimated_hours=1.5),
            get_consultation_call_task("Pre-session consultation call", -2, 5),
            get_session_day_task("Session day - Branding photography", 6, 3.0),
            get_editing_task("Initial photo selection & editing", 7, 4.0),
            get_gallery_delivery_task("Preview gallery delivery", 3, 8),
            get_editing_task("Client selection & final editing", 9, 3.0, offset_days=10),
            get_gallery_delivery_task("Complete brand package delivery", 14, 10, estimated_hours=1.0),
        ],
    }
