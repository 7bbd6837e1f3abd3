"""
Family Session Template
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


def get_family_template():
    """Get the Family Session timeline template"""
    return {
        "sessionType": "Family Session",
        "templateName": "Family Session Standard Timeline",
        "tasks": [
            get_contract_confirmed_task(),
            get_guide_task("Family preparation guide sent", -10, 2),
            get_consultation_call_task("Location & timing consultation", -7, 3),
            get_consultation_call_task("Pre-session family call", -2, 4),
            get_session_day_task("Session day - Family portraits", 5, 1.5),
            get_editing_task("Photo editing & enhancement", 6, 3.0),
            get_gallery_delivery_task("Online gallery delivery", 5, 7),
            task(
                "Print & product ordering consultation",
                14,
                8,
                can_automate=True,
                estimated_hours=1.0,
                requires_human=False,
            ),
        ],
    }
