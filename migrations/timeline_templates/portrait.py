"""
Portrait Session Template
Individual portraits, one-week delivery
"""

from .shared_tasks import (
    get_consultation_call_task,
    get_contract_confirmed_task,
    get_editing_task,
    get_gallery_delivery_task,
    get_guide_task,
    get_session_day_task,
)


def get_portrait_template():
    """Get the Portrait Session timeline template"""
    return {
        "sessionType": "Portrait Session",
        "templateName": "Portrait Session Standard Timeline",
        "tasks": [
            get_contract_confirmed_task(),
            get_guide_task("Style guide & preparation materials sent", -7, 2),
            get_consultation_call_task("Pre-session consultation call", -3, 3),
            get_session_day_task("Session day - Portrait photography", 4, 2.0),
            get_editing_task("Photo editing & enhancement", 5, 3.0),
            get_gallery_delivery_task("Preview gallery delivery", 3, 6),
            get_gallery_delivery_task("Final selection & delivery", 7, 7, estimated_hours=1.0),
        ],
    }
