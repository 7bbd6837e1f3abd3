"""
Executive Session Template
Corporate headshots with longer lead time
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


def get_executive_template():
    """Get the Executive Session timeline template"""
    return {
        "sessionType": "Executive Session",
        "templateName": "Executive Session Standard Timeline",
        "tasks": [
            get_contract_confirmed_task(offset_days=-21),
            get_guide_task("Executive style consultation", -14, 2, estimated_hours=1.5, can_batch=False),
            get_guide_task("Wardrobe & styling guide delivery", -10, 3, estimated_hours=2.0),
            task("Location & setup planning", -7, 4, estimated_hours=1.0),
            get_consultation_call_task("Pre-session strategy call", -2, 5, estimated_hours=0.75),
            get_session_day_task("Session day - Executive portraits", 6, 2.5),
            get_editing_task("Professional retouching & editing", 7, 4.0),
            get_gallery_delivery_task("Preview gallery with selections", 4, 8),
            get_gallery_delivery_task("Final high-resolution delivery", 7, 9, estimated_hours=1.0),
            get_guide_task("LinkedIn & website optimization guide", 10, 10, estimated_hours=1.5),
        ],
    }
